from vectorpackager.services.dependencies import DependencyService


def test_package_list_includes_debian_tooling_and_extras(dummy_logger, dummy_console):
    service = DependencyService(logger=dummy_logger, console=dummy_console, geteuid=lambda: 0)

    packages = service.package_list(["libicu-dev", "git", " "])

    assert "dpkg-dev" in packages
    assert "debhelper" in packages
    assert packages[-1] == "libicu-dev"
    assert packages.count("git") == 1


def test_build_commands_use_sudo_for_unprivileged_users(dummy_logger, dummy_console):
    service = DependencyService(logger=dummy_logger, console=dummy_console, geteuid=lambda: 1000)

    update_cmd, install_cmd = service.build_commands(["dpkg-dev", "debhelper"])

    assert update_cmd == ["sudo", "apt-get", "update"]
    assert install_cmd[:4] == ["sudo", "apt-get", "install", "-y"]
    assert install_cmd[-2:] == ["dpkg-dev", "debhelper"]


def test_install_runs_update_then_install_as_root(dummy_logger, dummy_console):
    service = DependencyService(logger=dummy_logger, console=dummy_console, geteuid=lambda: 0)
    calls = []

    service.install([], lambda cmd, **_kwargs: calls.append(cmd))

    assert [cmd[:2] for cmd in calls] == [["apt-get", "update"], ["apt-get", "install"]]


def test_requires_sudo_only_when_not_root(dummy_logger, dummy_console):
    assert DependencyService(logger=dummy_logger, console=dummy_console, geteuid=lambda: 1000).requires_sudo()
    assert not DependencyService(logger=dummy_logger, console=dummy_console, geteuid=lambda: 0).requires_sudo()
    assert not DependencyService(logger=dummy_logger, console=dummy_console, geteuid=None).requires_sudo()
