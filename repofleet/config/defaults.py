# Repofleet Default Configuration
# Template printed by `repofleet config --generate` and used for new configs

DEFAULT_TEMPLATE = """\
# Repofleet Configuration
#
# Each source maps a host/owner to a local directory.
# Strategies: manual (list repos), all (every repo of the owner),
#             regex (every repo whose owner/repo name matches a pattern)

sources:
  - name: "GitHub"
    source: github.com/your-username
    strategy: manual
    local_path: "~/Git/github"
    # branch: main  # optional, uses remote default if not set
    # ssh_options:
    #   port: 22  # optional, for non-standard SSH port
    #   private_key: "~/.ssh/id_rsa"  # optional, for private repos
    repos:
      - your-username/repo1
      - your-username/repo2
      # - name: your-username/repo3
      #   local_path: "~/work/repo3"  # optional per-repo override

  # - name: "Company Gitea"
  #   source: git.example.com/platform
  #   strategy: regex
  #   local_path: "~/Git/platform"
  #   regex_strategy:
  #     pattern: "^platform/svc-"
"""


def generate_default_config() -> str:
    """Return the default configuration as YAML text."""
    return DEFAULT_TEMPLATE
