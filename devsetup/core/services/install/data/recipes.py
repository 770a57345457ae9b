"""
L0 Data — Component recipe catalog.

Every installable component, in the order an interactive run offers
them.  Pure data; comprehensions only expand repetitive step lists.

Recipe fields:
    label           human-readable name
    kind            installer variant: apt, script, archive, deb,
                    sysctl, commands, gaming
    prompt          question asked in interactive mode
    check           command whose presence means "already installed"
    packages        apt packages
    repo            third-party apt repository (key_url, keyring,
                    dearmor, source, list_file)
    pre / post      command steps before / after the main install
    services        systemd units enabled and started after install
    script          vendor install script (url, args, shell, as_user,
                    creates)
    archive         downloadable archive (url, format, extract_to,
                    replaces, install_cmd, cleanup)
    deb             downloadable .deb (url, filename)
    sysctl          kernel parameters appended to /etc/sysctl.conf
    timers          systemd timers enabled after sysctl changes
    lines           idempotent lines appended to files
    blocks          marked multi-line blocks appended to files
    files           whole files written if missing (mode, overwrite,
                    as_user hands the file to the invoking user)
    replacements    in-place text replacements (regex: pattern mode)
    steps           ordered command steps (commands, gaming kinds)
    cpu_governor    scaling governor written for every core (gaming)
    clear_paths     globs removed from disk (gaming)
    version         (command, regex) that reads the installed version
    version_fixed   version recorded when there is nothing to read
    default_version version used to render ``{version}`` in URLs
    verify          (command, regex) used by the verification suite
    notes           messages logged after a successful install

Step fields: ``cmd`` (argv list), ``critical`` (default True),
``as_user`` (run as the invoking user), ``requires`` (skip unless the
command exists), ``unless_command`` (skip when any of these commands
exists), ``unless_exists`` (skip when the path exists), ``when`` (skip
unless a host condition holds, see ``detection/hardware.py``).

File edit entries (lines, blocks, files, replacements) also take
``requires`` and ``only_if_exists``.

Placeholders rendered at run time: ``{arch}``, ``{machine}``,
``{codename}``, ``{user}``, ``{home}``, ``{version}``, ``{today}``.
"""

from __future__ import annotations

_KEYRINGS = "/etc/apt/keyrings"
_SOURCES = "/etc/apt/sources.list.d"

# ── File payloads ───────────────────────────────────────────────

_IO_SCHEDULER_RULES = """\
# Non-rotational disks: mq-deadline
ACTION=="add|change", KERNEL=="sd[a-z]*|nvme[0-9]*n[0-9]*", ATTR{queue/rotational}=="0", ATTR{queue/scheduler}="mq-deadline"
"""

_UFW_DOCKER_RULES = """\
# BEGIN UFW AND DOCKER
*filter
:ufw-user-forward - [0:0]
:DOCKER-USER - [0:0]
-A DOCKER-USER -j RETURN -s 10.0.0.0/8
-A DOCKER-USER -j RETURN -s 172.16.0.0/12
-A DOCKER-USER -j RETURN -s 192.168.0.0/16

-A DOCKER-USER -j ufw-user-forward

-A DOCKER-USER -j DROP -p tcp -m tcp --tcp-flags FIN,SYN,RST,ACK SYN -d 192.168.0.0/16
-A DOCKER-USER -j DROP -p tcp -m tcp --tcp-flags FIN,SYN,RST,ACK SYN -d 10.0.0.0/8
-A DOCKER-USER -j DROP -p tcp -m tcp --tcp-flags FIN,SYN,RST,ACK SYN -d 172.16.0.0/12
-A DOCKER-USER -j DROP -p udp -m udp --dport 0:32767 -d 192.168.0.0/16
-A DOCKER-USER -j DROP -p udp -m udp --dport 0:32767 -d 10.0.0.0/8
-A DOCKER-USER -j DROP -p udp -m udp --dport 0:32767 -d 172.16.0.0/12

-A DOCKER-USER -j RETURN
COMMIT
# END UFW AND DOCKER
"""

_VIMRC = """\
" Better Vim defaults
set number relativenumber
set autoindent
set tabstop=4
set shiftwidth=4
set expandtab
set smarttab
set mouse=a
set clipboard=unnamedplus
set ignorecase
set smartcase
set incsearch
set hlsearch
set cursorline
syntax on
filetype plugin indent on

" Better navigation
nnoremap <C-h> <C-w>h
nnoremap <C-j> <C-w>j
nnoremap <C-k> <C-w>k
nnoremap <C-l> <C-w>l
"""

_SYSTEM_LIMITS = """\
# devsetup limits
* soft nofile 65536
* hard nofile 65536
* soft nproc 32768
* hard nproc 32768
"""

_DOCKER_DAEMON_JSON = """\
{
  "log-driver": "json-file",
  "log-opts": {
    "max-size": "10m",
    "max-file": "3"
  },
  "default-address-pools": [
    {
      "base": "172.17.0.0/16",
      "size": 24
    }
  ],
  "storage-driver": "overlay2"
}
"""

_CLEANUP_SCRIPT = """\
#!/bin/bash
# Weekly system cleanup (installed by devsetup)
apt-get autoremove -y
apt-get autoclean
journalctl --vacuum-time=7d
find /tmp -type f -atime +7 -delete 2>/dev/null
"""

_BASH_HISTORY = """\
# Better history settings
export HISTSIZE=10000
export HISTFILESIZE=20000
export HISTCONTROL=ignoredups:erasedups
shopt -s histappend
PROMPT_COMMAND="history -a; history -c; history -r; $PROMPT_COMMAND"
"""

_GIT_DEFAULTS = [
    ("init.defaultBranch", "main"),
    ("pull.rebase", "true"),
    ("fetch.prune", "true"),
    ("diff.colorMoved", "zebra"),
    ("core.autocrlf", "input"),
    ("rerere.enabled", "true"),
    ("help.autocorrect", "10"),
    ("alias.st", "status"),
    ("alias.co", "checkout"),
    ("alias.br", "branch"),
    ("alias.cm", "commit"),
    ("alias.unstage", "reset HEAD --"),
    ("alias.last", "log -1 HEAD"),
    (
        "alias.lg",
        "log --graph --pretty=format:'%Cred%h%Creset -%C(yellow)%d%Creset %s "
        "%Cgreen(%cr) %C(bold blue)<%an>%Creset' --abbrev-commit",
    ),
]

_GNOME_SETTINGS = [
    ("org.gnome.desktop.interface", "clock-show-weekday", "true"),
    ("org.gnome.desktop.interface", "show-battery-percentage", "true"),
    ("org.gnome.desktop.peripherals.touchpad", "tap-to-click", "true"),
    ("org.gnome.desktop.wm.preferences", "button-layout", "appmenu:minimize,maximize,close"),
]

_DASH_TO_DOCK = "org.gnome.shell.extensions.dash-to-dock"

_NVIDIA_SETTINGS = [
    "[gpu:0]/GpuPowerMizerMode=1",
    "[gpu:0]/PowerMizerEnable=1",
    "SyncToVBlank=0",
    "AllowFlipping=1",
]


COMPONENT_RECIPES: dict[str, dict] = {

    # ── System ──────────────────────────────────────────────────

    "system_update": {
        "label": "System update",
        "kind": "commands",
        "prompt": "Update OS and firmware?",
        "steps": [
            {"cmd": ["apt-get", "update"]},
            {"cmd": ["apt-get", "upgrade", "-y"]},
            {"cmd": ["apt-get", "autoremove", "-y"]},
            {"cmd": ["apt-get", "autoclean", "-y"]},
            {"cmd": ["fwupdmgr", "get-devices"], "critical": False, "requires": "fwupdmgr"},
            {"cmd": ["fwupdmgr", "get-updates"], "critical": False, "requires": "fwupdmgr"},
            {"cmd": ["fwupdmgr", "update", "-y"], "critical": False, "requires": "fwupdmgr"},
        ],
        "version_fixed": "{today}",
    },
    "common_dev_tools": {
        "label": "Common developer tools",
        "kind": "apt",
        "prompt": "Install common developer tools?",
        "packages": [
            "build-essential", "apt-transport-https", "ca-certificates",
            "curl", "wget", "software-properties-common", "apache2-utils",
            "make", "gnome-tweaks", "gnome-shell-extensions", "dconf-editor",
            "unzip", "git", "tilix", "htop", "neofetch", "vim", "tmux",
            "jq", "fzf", "ripgrep", "exa", "bat", "zoxide", "fd-find",
        ],
        "post": [
            {"cmd": ["snap", "install", "yq"], "critical": False, "requires": "snap"},
        ],
        "version_fixed": "latest",
    },
    "system_tweaks": {
        "label": "System tweaks",
        "kind": "sysctl",
        "prompt": "Apply system tweaks?",
        "sysctl": {"fs.inotify.max_user_watches": "10000000"},
        "version_fixed": "configured",
        "notes": ["Remember to configure font rendering via gnome-tweaks"],
    },

    # ── Languages ───────────────────────────────────────────────

    "java": {
        "label": "Java (OpenJDK 17 + Maven)",
        "kind": "apt",
        "prompt": "Install Java (OpenJDK 17 + Maven)?",
        "check": "javac",
        "packages": ["openjdk-17-jdk-headless", "maven"],
        "version": (["javac", "-version"], r"javac\s+(\S+)"),
        "verify": ("javac", r"javac"),
    },
    "go": {
        "label": "Go",
        "kind": "archive",
        "prompt": "Install Go?",
        "check": "go",
        "default_version": "1.23.4",
        "archive": {
            "url": "https://go.dev/dl/go{version}.linux-{arch}.tar.gz",
            "format": "tar.gz",
            "extract_to": "/usr/local",
            "replaces": "/usr/local/go",
        },
        "lines": [
            {
                "path": "{home}/.profile",
                "line": "export PATH=$PATH:/usr/local/go/bin:$HOME/go/bin",
                "marker": "/usr/local/go/bin",
                "backup": "profile",
            },
        ],
        "version": (["go", "version"], r"go version (go\d+\.\d+(?:\.\d+)?)"),
        "verify": ("go", r"go[0-9]"),
    },
    "rust": {
        "label": "Rust",
        "kind": "script",
        "prompt": "Install Rust?",
        "check": "rustc",
        "script": {
            "url": "https://sh.rustup.rs",
            "filename": "rustup-init.sh",
            "args": ["-y"],
            "as_user": True,
        },
        "version": (["rustc", "--version"], r"rustc\s+(\d+\.\d+\.\d+)"),
        "version_fixed": "latest",
        "verify": ("rustc", r"rustc"),
    },
    "python": {
        "label": "Python",
        "kind": "apt",
        "prompt": "Install Python?",
        "check": "python3",
        "packages": ["python3-minimal", "python3-pip"],
        "version": (["python3", "--version"], r"Python\s+(\d+\.\d+\.\d+)"),
        "verify": ("python3", r"Python"),
    },
    "nodejs": {
        "label": "Node.js 20",
        "kind": "script",
        "prompt": "Install NodeJS 20?",
        "check": "node",
        "script": {
            "url": "https://deb.nodesource.com/setup_20.x",
            "filename": "nodesource_setup.sh",
            "shell": "bash",
        },
        "packages": ["nodejs"],
        "version": (["node", "--version"], r"v(\d+\.\d+\.\d+)"),
        "verify": ("node", r"v[0-9]"),
    },
    "dotnet": {
        "label": ".NET SDK 8.0",
        "kind": "apt",
        "prompt": "Install .NET 8.0 SDK?",
        "check": "dotnet",
        "packages": ["dotnet-sdk-8.0"],
        "version": (["dotnet", "--version"], r"(\d+\.\d+\.\d+)"),
        "version_fixed": "8.0",
        "verify": ("dotnet", r"[0-9]"),
    },
    "ruby": {
        "label": "Ruby",
        "kind": "apt",
        "prompt": "Install Ruby?",
        "check": "ruby",
        "packages": ["ruby-full", "build-essential"],
        "post": [
            {
                "cmd": ["git", "clone", "https://github.com/rbenv/rbenv.git", "{home}/.rbenv"],
                "as_user": True,
                "unless_exists": "{home}/.rbenv",
            },
            {
                "cmd": [
                    "git", "clone", "https://github.com/rbenv/ruby-build.git",
                    "{home}/.rbenv/plugins/ruby-build",
                ],
                "as_user": True,
                "unless_exists": "{home}/.rbenv/plugins/ruby-build",
            },
        ],
        "lines": [
            {"path": "{home}/.bashrc", "line": 'export PATH="$HOME/.rbenv/bin:$PATH"',
             "marker": "rbenv/bin"},
            {"path": "{home}/.bashrc", "line": 'eval "$(rbenv init -)"',
             "marker": "rbenv init"},
            {"path": "{home}/.zshrc", "line": 'export PATH="$HOME/.rbenv/bin:$PATH"',
             "marker": "rbenv/bin", "only_if_exists": True},
            {"path": "{home}/.zshrc", "line": 'eval "$(rbenv init -)"',
             "marker": "rbenv init", "only_if_exists": True},
        ],
        "version": (["ruby", "--version"], r"ruby\s+(\S+)"),
        "verify": ("ruby", r"ruby"),
    },

    # ── Databases ───────────────────────────────────────────────

    "postgresql": {
        "label": "PostgreSQL 16",
        "kind": "apt",
        "prompt": "Install PostgreSQL?",
        "check": "psql",
        "repo": {
            "key_url": "https://www.postgresql.org/media/keys/ACCC4CF8.asc",
            "keyring": f"{_KEYRINGS}/postgresql.gpg",
            "dearmor": True,
            "source": (
                "deb [signed-by=/etc/apt/keyrings/postgresql.gpg] "
                "http://apt.postgresql.org/pub/repos/apt {codename}-pgdg main"
            ),
            "list_file": f"{_SOURCES}/pgdg.list",
        },
        "packages": ["postgresql-16", "postgresql-contrib-16"],
        "services": ["postgresql"],
        "version": (["psql", "--version"], r"psql \(PostgreSQL\)\s+(\S+)"),
        "verify": ("psql", r"psql"),
        "notes": [
            "Default user: postgres",
            "To set password: sudo -u postgres psql -c \"ALTER USER postgres PASSWORD '...';\"",
        ],
    },
    "mysql": {
        "label": "MySQL",
        "kind": "apt",
        "prompt": "Install MySQL?",
        "check": "mysql",
        "packages": ["mysql-server", "mysql-client"],
        "services": ["mysql"],
        "version": (["mysql", "--version"], r"Ver\s+(\d+\.\d+\.\d+)"),
        "verify": ("mysql", r"mysql"),
        "notes": ["Run 'sudo mysql_secure_installation' to secure your installation"],
    },
    "mongodb": {
        "label": "MongoDB 7.0",
        "kind": "apt",
        "prompt": "Install MongoDB?",
        "check": "mongod",
        "repo": {
            "key_url": "https://www.mongodb.org/static/pgp/server-7.0.asc",
            "keyring": "/usr/share/keyrings/mongodb-server-7.0.gpg",
            "dearmor": True,
            "source": (
                "deb [ arch=amd64,arm64 signed-by=/usr/share/keyrings/mongodb-server-7.0.gpg ] "
                "https://repo.mongodb.org/apt/ubuntu {codename}/mongodb-org/7.0 multiverse"
            ),
            "list_file": f"{_SOURCES}/mongodb-org-7.0.list",
        },
        "packages": ["mongodb-org"],
        "services": ["mongod"],
        "version": (["mongod", "--version"], r"db version v?(\S+)"),
        "verify": ("mongod", r"db version"),
        "notes": ["MongoDB running on port 27017"],
    },

    # ── IDEs ────────────────────────────────────────────────────

    "vscode": {
        "label": "Visual Studio Code",
        "kind": "apt",
        "prompt": "Install VS Code?",
        "check": "code",
        "repo": {
            "key_url": "https://packages.microsoft.com/keys/microsoft.asc",
            "keyring": f"{_KEYRINGS}/packages.microsoft.gpg",
            "dearmor": True,
            "source": (
                "deb [arch=amd64,arm64,armhf signed-by=/etc/apt/keyrings/packages.microsoft.gpg] "
                "https://packages.microsoft.com/repos/code stable main"
            ),
            "list_file": f"{_SOURCES}/vscode.list",
        },
        "packages": ["code"],
        "version": (["code", "--version"], r"^(\S+)"),
        "verify": ("code", r"[0-9]"),
    },
    "eclipse": {
        "label": "Eclipse IDE",
        "kind": "commands",
        "prompt": "Install Eclipse?",
        "check": "eclipse",
        "steps": [
            {"cmd": ["snap", "install", "eclipse", "--classic"]},
        ],
        "version_fixed": "latest",
    },

    # ── Cloud tools ─────────────────────────────────────────────

    "docker": {
        "label": "Docker",
        "kind": "apt",
        "prompt": "Install Docker?",
        "check": "docker",
        "repo": {
            "key_url": "https://download.docker.com/linux/ubuntu/gpg",
            "keyring": f"{_KEYRINGS}/docker.gpg",
            "dearmor": True,
            "source": (
                "deb [arch={arch} signed-by=/etc/apt/keyrings/docker.gpg] "
                "https://download.docker.com/linux/ubuntu {codename} stable"
            ),
            "list_file": f"{_SOURCES}/docker.list",
        },
        "packages": [
            "docker-ce", "docker-ce-cli", "containerd.io",
            "docker-buildx-plugin", "docker-compose-plugin",
        ],
        "post": [
            {"cmd": ["usermod", "-aG", "docker", "{user}"]},
        ],
        "version": (["docker", "--version"], r"Docker version\s+(\d+\.\d+\.\d+)"),
        "verify": ("docker", r"Docker"),
    },
    "kubectl": {
        "label": "kubectl",
        "kind": "apt",
        "prompt": "Install kubectl?",
        "check": "kubectl",
        "repo": {
            "key_url": "https://pkgs.k8s.io/core:/stable:/v1.29/deb/Release.key",
            "keyring": f"{_KEYRINGS}/kubernetes-apt-keyring.gpg",
            "dearmor": True,
            "source": (
                "deb [signed-by=/etc/apt/keyrings/kubernetes-apt-keyring.gpg] "
                "https://pkgs.k8s.io/core:/stable:/v1.29/deb/ /"
            ),
            "list_file": f"{_SOURCES}/kubernetes.list",
        },
        "packages": ["kubectl"],
        "version": (["kubectl", "version", "--client=true"], r"v(\d+\.\d+\.\d+)"),
        "verify": ("kubectl", r"Client"),
    },
    "helm": {
        "label": "Helm",
        "kind": "script",
        "prompt": "Install Helm?",
        "check": "helm",
        "script": {
            "url": "https://raw.githubusercontent.com/helm/helm/main/scripts/get-helm-3",
            "filename": "get_helm.sh",
            "shell": "bash",
        },
        "version": (["helm", "version", "--short"], r"(v\d+\.\d+\.\d+)"),
        "verify": ("helm", r"v[0-9]"),
    },
    "terraform": {
        "label": "Terraform",
        "kind": "apt",
        "prompt": "Install Terraform?",
        "check": "terraform",
        "repo": {
            "key_url": "https://apt.releases.hashicorp.com/gpg",
            "keyring": "/usr/share/keyrings/hashicorp-archive-keyring.gpg",
            "dearmor": True,
            "source": (
                "deb [signed-by=/usr/share/keyrings/hashicorp-archive-keyring.gpg] "
                "https://apt.releases.hashicorp.com {codename} main"
            ),
            "list_file": f"{_SOURCES}/hashicorp.list",
        },
        "packages": ["terraform"],
        "version": (["terraform", "version"], r"Terraform\s+(v\d+\.\d+\.\d+)"),
        "verify": ("terraform", r"Terraform"),
    },
    "aws_cli": {
        "label": "AWS CLI v2",
        "kind": "archive",
        "prompt": "Install AWS CLI?",
        "check": "aws",
        "archive": {
            "url": "https://awscli.amazonaws.com/awscli-exe-linux-{machine}.zip",
            "format": "zip",
            "install_cmd": ["{extract_dir}/aws/install", "--update"],
            "cleanup": True,
        },
        "version": (["aws", "--version"], r"aws-cli/(\S+)"),
    },
    "github_cli": {
        "label": "GitHub CLI",
        "kind": "apt",
        "prompt": "Install GitHub CLI?",
        "check": "gh",
        "repo": {
            "key_url": "https://cli.github.com/packages/githubcli-archive-keyring.gpg",
            "keyring": "/usr/share/keyrings/githubcli-archive-keyring.gpg",
            "dearmor": False,
            "source": (
                "deb [arch={arch} signed-by=/usr/share/keyrings/githubcli-archive-keyring.gpg] "
                "https://cli.github.com/packages stable main"
            ),
            "list_file": f"{_SOURCES}/github-cli.list",
        },
        "packages": ["gh"],
        "version": (["gh", "--version"], r"gh version\s+(\d+\.\d+\.\d+)"),
        "verify": ("gh", r"gh version"),
    },

    # ── Productivity ────────────────────────────────────────────

    "discord": {
        "label": "Discord",
        "kind": "deb",
        "prompt": "Install Discord?",
        "check": "discord",
        "deb": {
            "url": "https://discord.com/api/download?platform=linux&format=deb",
            "filename": "discord.deb",
        },
        "version_fixed": "latest",
    },
    "teams": {
        "label": "Microsoft Teams",
        "kind": "deb",
        "prompt": "Install Microsoft Teams?",
        "check": "teams",
        "deb": {
            "url": "https://go.microsoft.com/fwlink/p/?LinkID=2112886&clcid=0x409&culture=en-us&country=us",
            "filename": "teams.deb",
        },
        "version_fixed": "latest",
    },
    "thunderbird": {
        "label": "Thunderbird (Outlook alternative)",
        "kind": "apt",
        "prompt": "Install Outlook (Thunderbird)?",
        "check": "thunderbird",
        "packages": ["thunderbird"],
        "version": (["thunderbird", "--version"], r"Thunderbird\s+(\S+)"),
        "notes": [
            "For Outlook/Exchange: install the 'Owl for Exchange' add-on",
            "Alternative: use the Outlook web app in a browser",
        ],
    },
    "brave": {
        "label": "Brave browser",
        "kind": "apt",
        "prompt": "Install Brave browser?",
        "check": "brave-browser",
        "repo": {
            "key_url": "https://brave-browser-apt-release.s3.brave.com/brave-browser-archive-keyring.gpg",
            "keyring": "/usr/share/keyrings/brave-browser-archive-keyring.gpg",
            "dearmor": False,
            "source": (
                "deb [signed-by=/usr/share/keyrings/brave-browser-archive-keyring.gpg] "
                "https://brave-browser-apt-release.s3.brave.com/ stable main"
            ),
            "list_file": f"{_SOURCES}/brave-browser-release.list",
        },
        "packages": ["brave-browser"],
        "version": (["brave-browser", "--version"], r"Brave Browser\s+(\S+)"),
    },

    # ── Gaming ──────────────────────────────────────────────────

    "steam": {
        "label": "Steam",
        "kind": "apt",
        "prompt": "Install Steam?",
        "check": "steam",
        "pre": [
            {"cmd": ["dpkg", "--add-architecture", "i386"]},
            {"cmd": ["apt-get", "update"]},
        ],
        "packages": ["steam-installer"],
        "version_fixed": "installed",
        "notes": ["Launch Steam from the applications menu to complete setup"],
    },
    "gaming_optimization": {
        "label": "Gaming optimizations (NVIDIA, GameMode, CPU)",
        "kind": "gaming",
        "prompt": "Optimize system for gaming (NVIDIA, GameMode, CPU)?",
        "packages": ["gamemode", "cpufrequtils"],
        "steps": [
            # Pop!_OS ships its own NVIDIA driver package
            {
                "cmd": ["apt-get", "install", "-y", "system76-driver-nvidia"],
                "when": "nvidia_gpu",
                "requires": "system76-power",
                "unless_command": "nvidia-smi",
            },
            {
                "cmd": ["ubuntu-drivers", "autoinstall"],
                "when": "nvidia_gpu",
                "requires": "ubuntu-drivers",
                "unless_command": ["nvidia-smi", "system76-power"],
            },
            *[
                {
                    "cmd": ["nvidia-settings", "-a", setting],
                    "critical": False,
                    "when": "nvidia_gpu",
                    "requires": "nvidia-settings",
                }
                for setting in _NVIDIA_SETTINGS
            ],
            {"cmd": ["cpufreq-set", "-g", "performance"], "critical": False, "requires": "cpufreq-set"},
        ],
        "cpu_governor": "performance",
        "clear_paths": ["{home}/.cache/*shader*", "{home}/.nv/GLCache"],
        "version_fixed": "configured",
        "notes": [
            "Games launched through GameMode get the performance profile",
            "The CPU governor resets on reboot",
            "Restart your PC for driver changes to take effect",
        ],
    },

    # ── Shell ───────────────────────────────────────────────────

    "zsh": {
        "label": "ZSH + Oh-My-ZSH",
        "kind": "script",
        "prompt": "Setup ZSH and Oh-My-ZSH?",
        "pre": [
            {"cmd": ["apt-get", "install", "-y", "zsh"]},
        ],
        "script": {
            "url": "https://raw.githubusercontent.com/ohmyzsh/ohmyzsh/master/tools/install.sh",
            "filename": "ohmyzsh-install.sh",
            "args": ["--unattended"],
            "as_user": True,
            "creates": "{home}/.oh-my-zsh",
        },
        "post": [
            {
                "cmd": [
                    "git", "clone", "https://github.com/zsh-users/zsh-syntax-highlighting.git",
                    "{home}/.oh-my-zsh/custom/plugins/zsh-syntax-highlighting",
                ],
                "as_user": True,
                "critical": False,
                "unless_exists": "{home}/.oh-my-zsh/custom/plugins/zsh-syntax-highlighting",
            },
            {"cmd": ["chsh", "-s", "/usr/bin/zsh", "{user}"]},
        ],
        "replacements": [
            {
                "path": "{home}/.zshrc",
                "old": 'ZSH_THEME="robbyrussell"',
                "new": 'ZSH_THEME="blinks"',
                "backup": "zshrc",
            },
            {
                "path": "{home}/.zshrc",
                "old": "plugins=(git)",
                "new": (
                    "plugins=(git dotnet rust golang mvn npm terraform aws gradle "
                    "zsh-syntax-highlighting)"
                ),
            },
        ],
        "version": (["zsh", "--version"], r"zsh\s+(\S+)"),
    },

    # ── Optimization & security ─────────────────────────────────

    "system_optimization": {
        "label": "System optimizations (swap, I/O, network, SSD)",
        "kind": "sysctl",
        "prompt": "Apply system optimizations (swap, I/O, network)?",
        "sysctl": {
            "vm.swappiness": "10",
            "vm.vfs_cache_pressure": "50",
            "net.core.default_qdisc": "fq",
            "net.ipv4.tcp_congestion_control": "bbr",
            "net.ipv4.tcp_fastopen": "3",
            "net.core.netdev_max_backlog": "5000",
            "net.core.rmem_max": "16777216",
            "net.core.wmem_max": "16777216",
        },
        "timers": ["fstrim.timer"],
        "files": [
            {"path": "/etc/udev/rules.d/60-ioschedulers.rules", "content": _IO_SCHEDULER_RULES},
        ],
        "post": [
            {"cmd": ["udevadm", "control", "--reload-rules"], "critical": False, "requires": "udevadm"},
            {
                "cmd": ["udevadm", "trigger", "--subsystem-match=block", "--action=change"],
                "critical": False,
                "requires": "udevadm",
            },
        ],
        "version_fixed": "configured",
        "notes": [
            "Some optimizations require a reboot to take full effect",
            "If / is not mounted with noatime, consider adding it in /etc/fstab",
        ],
    },
    "firewall": {
        "label": "UFW firewall",
        "kind": "commands",
        "prompt": "Configure firewall (UFW)?",
        "packages": ["ufw"],
        "steps": [
            {"cmd": ["ufw", "--force", "reset"]},
            {"cmd": ["ufw", "default", "deny", "incoming"]},
            {"cmd": ["ufw", "default", "allow", "outgoing"]},
            {"cmd": ["ufw", "allow", "80/tcp", "comment", "HTTP"]},
            {"cmd": ["ufw", "allow", "443/tcp", "comment", "HTTPS"]},
            {"cmd": ["ufw", "delete", "allow", "22/tcp"], "critical": False},
            {"cmd": ["ufw", "limit", "22/tcp", "comment", "SSH with rate limiting"]},
        ],
        # Routes published container ports through UFW
        "blocks": [
            {
                "path": "/etc/ufw/after.rules",
                "text": _UFW_DOCKER_RULES,
                "marker": "# BEGIN UFW AND DOCKER",
                "requires": "docker",
                "only_if_exists": True,
                "backup": "ufw-after.rules",
            },
        ],
        "post": [
            {"cmd": ["ufw", "--force", "enable"]},
            {"cmd": ["systemctl", "enable", "ufw"], "critical": False},
        ],
        "version_fixed": "ufw-configured",
        "notes": ["Firewall is now active. Ensure SSH (port 22) works before logging out!"],
    },
    "system_configuration": {
        "label": "System configuration (Git, GNOME, Vim, limits)",
        "kind": "commands",
        "prompt": "Apply system configurations (Git, GNOME, Vim, limits, etc.)?",
        "steps": [
            {"cmd": ["locale-gen", "en_US.UTF-8"], "critical": False, "requires": "locale-gen"},
            {"cmd": ["localectl", "set-locale", "LANG=en_US.UTF-8"], "critical": False,
             "requires": "localectl"},
            *[
                {"cmd": ["git", "config", "--global", key, value], "as_user": True, "requires": "git"}
                for key, value in _GIT_DEFAULTS
            ],
            *[
                {"cmd": ["gsettings", "set", schema, key, value], "as_user": True,
                 "critical": False, "requires": "gsettings"}
                for schema, key, value in _GNOME_SETTINGS
            ],
            {"cmd": ["gsettings", "set", _DASH_TO_DOCK, "click-action", "minimize"],
             "as_user": True, "critical": False, "when": f"gsettings_schema:{_DASH_TO_DOCK}"},
            {"cmd": ["gsettings", "set", _DASH_TO_DOCK, "dock-position", "BOTTOM"],
             "as_user": True, "critical": False, "when": f"gsettings_schema:{_DASH_TO_DOCK}"},
        ],
        "files": [
            {"path": "{home}/.vimrc", "content": _VIMRC, "as_user": True},
            {"path": "/etc/docker/daemon.json", "content": _DOCKER_DAEMON_JSON, "requires": "docker"},
            {"path": "/usr/local/bin/system-cleanup.sh", "content": _CLEANUP_SCRIPT,
             "mode": 0o755, "overwrite": True},
        ],
        "blocks": [
            {"path": "/etc/security/limits.conf", "text": _SYSTEM_LIMITS,
             "marker": "# devsetup limits", "backup": "limits.conf"},
            {"path": "{home}/.bashrc", "text": _BASH_HISTORY,
             "marker": "# Better history settings", "only_if_exists": True},
        ],
        "replacements": [
            {"path": "/etc/default/grub", "old": r"^GRUB_TIMEOUT=.*$", "new": "GRUB_TIMEOUT=2",
             "regex": True, "backup": "grub"},
        ],
        "post": [
            {"cmd": ["update-grub"], "critical": False, "requires": "update-grub"},
            {"cmd": ["ln", "-sf", "/usr/local/bin/system-cleanup.sh", "/etc/cron.weekly/system-cleanup"]},
            {"cmd": ["systemctl", "restart", "docker"], "critical": False, "requires": "docker"},
        ],
        "version_fixed": "configured",
        "notes": ["Some changes require logout/reboot to take effect"],
    },
}
