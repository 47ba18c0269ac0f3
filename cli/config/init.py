"""
outliner config init - Write a settings file with defaults.
"""

from infra.config import CONFIG_FILENAME, OutlineSettings, SettingsManager


def cmd_config_init(args):
    manager = SettingsManager(args.config or CONFIG_FILENAME)

    if manager.exists() and not args.force:
        print(f"✗ Settings already exist at: {manager.config_path}")
        print("  Use --force to overwrite")
        return

    settings = OutlineSettings()
    manager.save(settings)
    print(f"✓ Created settings at: {manager.config_path}")

    if settings.llm.resolved_api_key():
        print("  ✓ API key: configured")
    else:
        print(f"  ○ API key: not set (using {settings.llm.api_key})")
