"""
outliner config show - Display the effective settings.
"""

import json
import yaml

from infra.config import SettingsManager, load_settings


def cmd_config_show(args):
    settings = load_settings(args.config)
    data = settings.model_dump(mode="json")

    resolved = settings.llm.resolved_api_key()
    if args.reveal_keys:
        data['llm']['api_key'] = resolved or "(not set)"
    else:
        data['llm']['api_key'] = _mask_key(resolved)

    if args.json:
        print(json.dumps(data, indent=2, default=str))
        return

    path = SettingsManager(args.config).config_path if args.config else None
    if path is not None and not path.exists():
        print(f"○ No settings file at {path}, showing defaults\n")
    print(yaml.dump(data, default_flow_style=False, sort_keys=False))


def _mask_key(value: str) -> str:
    """Mask an API key for display."""
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "****"
    return value[:4] + "..." + value[-4:]
