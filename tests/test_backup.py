"""
Tests for pre-change backups and idempotent config file edits.
"""

from pathlib import Path

from devsetup.core.persistence.transaction_log import TransactionLog
from devsetup.core.services.install.execution.backup import BackupManager, get_backup_dir
from devsetup.core.services.install.execution.file_edits import (
    ensure_block,
    ensure_line,
    file_contains,
    replace_in_file,
    write_file,
)


class TestBackupManager:
    def test_copy_and_log(self, tmp_path: Path):
        source = tmp_path / ".zshrc"
        source.write_text("plugins=(git)\n")
        log = TransactionLog(tmp_path / "transaction.log")
        manager = BackupManager(tmp_path / "backups", transaction_log=log)

        copy = manager.create_backup(source)

        assert copy is not None
        assert copy.parent == tmp_path / "backups"
        assert copy.name.startswith(".zshrc.") and copy.name.endswith(".bak")
        assert copy.read_text() == "plugins=(git)\n"
        assert manager.created == [copy]
        assert f"BACKUP: {source} - {copy}" in log.path.read_text()

    def test_custom_name(self, tmp_path: Path):
        source = tmp_path / "sysctl.conf"
        source.write_text("")
        copy = BackupManager(tmp_path / "backups").create_backup(source, "sysctl")
        assert copy.name.startswith("sysctl.")

    def test_missing_file(self, tmp_path: Path):
        manager = BackupManager(tmp_path / "backups")
        assert manager.create_backup(tmp_path / "nope") is None
        assert not (tmp_path / "backups").exists()

    def test_dry_run(self, tmp_path: Path):
        source = tmp_path / ".bashrc"
        source.write_text("x")
        manager = BackupManager(tmp_path / "backups", dry_run=True)
        assert manager.create_backup(source) is None
        assert not (tmp_path / "backups").exists()
        assert manager.created == []

    def test_backup_all(self, tmp_path: Path):
        for name in (".bashrc", ".profile"):
            (tmp_path / name).write_text(name)
        manager = BackupManager(tmp_path / "backups")
        made = manager.backup_all([tmp_path / ".bashrc", tmp_path / ".zshrc", tmp_path / ".profile"])
        assert len(made) == 2

    def test_backup_dir_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("DEVSETUP_BACKUP_DIR", str(tmp_path))
        assert get_backup_dir() == tmp_path


class TestEnsureLine:
    def test_appends_once(self, tmp_path: Path):
        path = tmp_path / ".bashrc"
        path.write_text("# existing")
        assert ensure_line(path, "export GOPATH=$HOME/go")
        assert not ensure_line(path, "export GOPATH=$HOME/go")
        assert path.read_text() == "# existing\nexport GOPATH=$HOME/go\n"

    def test_marker(self, tmp_path: Path):
        path = tmp_path / ".bashrc"
        path.write_text('export PATH="$HOME/.rbenv/bin:$PATH"\n')
        assert not ensure_line(path, 'export PATH="$HOME/.rbenv/bin:$PATH:/x"', marker=".rbenv/bin")

    def test_creates_file(self, tmp_path: Path):
        path = tmp_path / "new" / ".profile"
        assert ensure_line(path, "line")
        assert path.read_text() == "line\n"

    def test_backup_before_first_change(self, tmp_path: Path):
        path = tmp_path / ".profile"
        path.write_text("a\n")
        backups = BackupManager(tmp_path / "backups")
        ensure_line(path, "b", backups=backups, backup_name="profile")
        ensure_line(path, "b", backups=backups, backup_name="profile")
        assert len(backups.created) == 1
        assert backups.created[0].read_text() == "a\n"

    def test_dry_run(self, tmp_path: Path):
        path = tmp_path / ".profile"
        assert ensure_line(path, "line", dry_run=True)
        assert not path.exists()


class TestReplaceInFile:
    def test_replace(self, tmp_path: Path):
        path = tmp_path / ".zshrc"
        path.write_text('ZSH_THEME="robbyrussell"\n')
        assert replace_in_file(path, "robbyrussell", "blinks")
        assert path.read_text() == 'ZSH_THEME="blinks"\n'
        assert not replace_in_file(path, "robbyrussell", "blinks")

    def test_missing_file(self, tmp_path: Path):
        assert not replace_in_file(tmp_path / "nope", "a", "b")

    def test_dry_run(self, tmp_path: Path):
        path = tmp_path / ".zshrc"
        path.write_text("old\n")
        assert replace_in_file(path, "old", "new", dry_run=True)
        assert path.read_text() == "old\n"

    def test_file_contains(self, tmp_path: Path):
        path = tmp_path / "f"
        assert not file_contains(path, "x")
        path.write_text("abc")
        assert file_contains(path, "b")

    def test_regex_replace(self, tmp_path: Path):
        path = tmp_path / "grub"
        path.write_text('GRUB_DEFAULT=0\nGRUB_TIMEOUT=10\nGRUB_TIMEOUT_STYLE=hidden\n')
        assert replace_in_file(path, r"^GRUB_TIMEOUT=.*$", "GRUB_TIMEOUT=2", regex=True)
        assert path.read_text() == 'GRUB_DEFAULT=0\nGRUB_TIMEOUT=2\nGRUB_TIMEOUT_STYLE=hidden\n'
        # Already at the target value
        assert not replace_in_file(path, r"^GRUB_TIMEOUT=.*$", "GRUB_TIMEOUT=2", regex=True)

    def test_regex_backup_only_on_change(self, tmp_path: Path):
        path = tmp_path / "grub"
        path.write_text("GRUB_TIMEOUT=2\n")
        backups = BackupManager(tmp_path / "backups")
        replace_in_file(
            path, r"^GRUB_TIMEOUT=.*$", "GRUB_TIMEOUT=2",
            regex=True, backups=backups, backup_name="grub",
        )
        assert backups.created == []


class TestEnsureBlock:
    LIMITS = "# devsetup limits\n* soft nofile 65536\n* hard nofile 65536\n"

    def test_appends_after_blank_line(self, tmp_path: Path):
        path = tmp_path / "limits.conf"
        path.write_text("# /etc/security/limits.conf\n")
        assert ensure_block(path, self.LIMITS, marker="# devsetup limits")
        assert path.read_text() == (
            "# /etc/security/limits.conf\n\n# devsetup limits\n"
            "* soft nofile 65536\n* hard nofile 65536\n"
        )

    def test_idempotent(self, tmp_path: Path):
        path = tmp_path / "limits.conf"
        ensure_block(path, self.LIMITS, marker="# devsetup limits")
        content = path.read_text()
        assert not ensure_block(path, self.LIMITS, marker="# devsetup limits")
        assert path.read_text() == content

    def test_dry_run(self, tmp_path: Path):
        path = tmp_path / "limits.conf"
        assert ensure_block(path, self.LIMITS, marker="# devsetup limits", dry_run=True)
        assert not path.exists()


class TestWriteFile:
    def test_creates_with_mode(self, tmp_path: Path):
        path = tmp_path / "bin" / "system-cleanup.sh"
        assert write_file(path, "#!/bin/bash\n", mode=0o755)
        assert path.read_text() == "#!/bin/bash\n"
        assert path.stat().st_mode & 0o777 == 0o755

    def test_keeps_existing(self, tmp_path: Path):
        path = tmp_path / ".vimrc"
        path.write_text("set nocompatible\n")
        assert not write_file(path, "syntax on\n")
        assert path.read_text() == "set nocompatible\n"

    def test_overwrite(self, tmp_path: Path):
        path = tmp_path / "system-cleanup.sh"
        path.write_text("old\n")
        assert write_file(path, "new\n", overwrite=True)
        assert path.read_text() == "new\n"

    def test_dry_run(self, tmp_path: Path):
        path = tmp_path / ".vimrc"
        assert write_file(path, "syntax on\n", dry_run=True)
        assert not path.exists()
