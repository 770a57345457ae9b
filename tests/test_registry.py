"""
Tests for the installer protocol, registry and mock installer.
"""

from devsetup.core.services.install.data.recipes import COMPONENT_RECIPES
from devsetup.core.services.install.installers.apt import AptInstaller
from devsetup.core.services.install.installers.archive import ArchiveInstaller, DebInstaller
from devsetup.core.services.install.installers.builtin import build_default_registry
from devsetup.core.services.install.installers.mock import MockInstaller
from devsetup.core.services.install.installers.registry import InstallerRegistry
from devsetup.core.services.install.installers.script import ScriptInstaller
from devsetup.core.services.install.installers.system import (
    CommandInstaller,
    GamingInstaller,
    SysctlInstaller,
)


class TestMockInstaller:
    def test_default_success(self, make_context):
        mock = MockInstaller("tool")
        receipt = mock.install(make_context())
        assert receipt.ok
        assert receipt.version == "1.0"
        assert mock.call_count == 1

    def test_failure(self, make_context):
        mock = MockInstaller("tool")
        mock.set_failure("Intentional failure")
        receipt = mock.install(make_context())
        assert receipt.failed
        assert receipt.error == "Intentional failure"

    def test_shared_call_log(self, make_context):
        log: list[str] = []
        ctx = make_context()
        MockInstaller("a", call_log=log).install(ctx)
        MockInstaller("b", call_log=log).install(ctx)
        assert log == ["a", "b"]


class TestInstallerRegistry:
    def test_register_and_get(self):
        registry = InstallerRegistry()
        mock = MockInstaller("tool")
        registry.register(mock)
        assert registry.get("tool") is mock
        assert registry.has("tool")
        assert registry.list_installers() == ["tool"]

    def test_unregister(self):
        registry = InstallerRegistry()
        registry.register(MockInstaller("tool"))
        registry.unregister("tool")
        assert not registry.has("tool")

    def test_run_unknown(self, make_context):
        receipt = InstallerRegistry().run("nope", make_context())
        assert receipt.failed
        assert "No installer registered" in receipt.error

    def test_run_success_timed(self, make_context):
        registry = InstallerRegistry()
        registry.register(MockInstaller("tool", version="2.1"))
        receipt = registry.run("tool", make_context())
        assert receipt.ok
        assert receipt.version == "2.1"
        assert receipt.duration_ms >= 0

    def test_run_converts_exceptions(self, make_context):
        registry = InstallerRegistry()
        mock = MockInstaller("tool")
        mock.set_raises(RuntimeError("kaboom"))
        registry.register(mock)

        receipt = registry.run("tool", make_context())
        assert receipt.failed
        assert "kaboom" in receipt.error

    def test_dry_run_success_is_skip(self, make_context):
        registry = InstallerRegistry()
        mock = MockInstaller("tool")
        registry.register(mock)

        receipt = registry.run("tool", make_context(dry_run=True))
        assert receipt.status == "skipped"
        assert receipt.metadata["dry_run"] is True
        assert mock.call_count == 1

    def test_collects_runner_warnings(self, make_context, make_runner):
        class _Noisy(MockInstaller):
            def install(self, ctx):
                ctx.runner.run(["fwupdmgr", "update"], critical=False)
                return super().install(ctx)

        runner = make_runner(fail_on=("fwupdmgr",))
        registry = InstallerRegistry()
        registry.register(_Noisy("tool"))
        receipt = registry.run("tool", make_context(runner=runner))
        assert receipt.ok
        assert any("Non-critical step failed" in w for w in receipt.warnings)


class TestDefaultRegistry:
    def test_every_recipe_registered(self):
        registry = build_default_registry()
        assert registry.list_installers() == list(COMPONENT_RECIPES)

    def test_kinds(self):
        registry = build_default_registry()
        assert isinstance(registry.get("docker"), AptInstaller)
        assert isinstance(registry.get("rust"), ScriptInstaller)
        assert isinstance(registry.get("go"), ArchiveInstaller)
        assert isinstance(registry.get("discord"), DebInstaller)
        assert isinstance(registry.get("system_tweaks"), SysctlInstaller)
        assert isinstance(registry.get("firewall"), CommandInstaller)
        assert isinstance(registry.get("system_configuration"), CommandInstaller)
        assert isinstance(registry.get("gaming_optimization"), GamingInstaller)

    def test_labels(self):
        assert build_default_registry().get("aws_cli").label == "AWS CLI v2"
