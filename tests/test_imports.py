"""Test that all modules can be imported without errors."""


def test_main_package_import():
    """Test that main package imports successfully."""
    import mapskin

    assert mapskin.__name__ == "mapskin"
    assert mapskin.__version__


def test_cli_imports():
    """Test CLI module imports."""
    import mapskin.cli
    from mapskin.cli import style_cmd
    from mapskin.cli.main import main

    assert mapskin.cli.cli.name == "cli"
    assert callable(main)
    assert callable(style_cmd.apply)


def test_core_imports():
    """Style modules import without an engine."""
    from mapskin.style import appliers, classifier, orchestrator, reconcile

    assert classifier.GROUP_KEYS[0] == "background"
    assert callable(appliers.apply_all_style_controls)
    assert orchestrator.DEFAULT_FAILSAFE_TIMEOUT == 15.0
    assert reconcile.SwitchContext.startup().mode == "startup"


def test_lazy_utils():
    import mapskin.utils as utils

    assert callable(utils.setup_logging)
    assert callable(utils.merge_dicts)
