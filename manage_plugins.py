#!/usr/bin/env python3
"""Command line tool for the plugins of the update service."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

# Ensure project root is in path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

load_dotenv(project_root / ".env")

from api.constants import BUNDLED_PLUGINS_DIR, INSTALLED_PLUGINS_DIR, PLUGIN_CONFIG_FILE
from api.plugins.manager import PluginManager
from api.services.transient_cache import TransientCache


def get_manager() -> PluginManager:
    """PluginManager over the service's plugin directories, with a cache of its own."""
    return PluginManager(
        bundled_dir=BUNDLED_PLUGINS_DIR,
        installed_dir=INSTALLED_PLUGINS_DIR,
        config_file=PLUGIN_CONFIG_FILE,
        cache=TransientCache(),
    )


def run_with_plugins(job):
    """Start the enabled plugins, run ``job(manager)`` and stop them again."""

    async def run():
        manager = get_manager()
        await manager.load_all()
        try:
            return await job(manager)
        finally:
            await manager.stop_all()

    return asyncio.run(run())


def cmd_list(args):
    """List installed plugins."""

    async def job(manager):
        return manager.list_plugins()

    plugins = run_with_plugins(job)
    if not plugins:
        print("No plugins installed.")
        return

    print(f"{'ID':<30} {'Version':<10} {'State':<11} {'Basename'}")
    print("-" * 90)
    for p in plugins:
        print(f"{p['id']:<30} {p['version']:<10} {p['state']:<11} {p['basename']}")


def cmd_info(args):
    """Show one plugin, including the metadata it reports once started."""

    async def job(manager):
        return manager.get_plugin_info(args.plugin_id)

    info = run_with_plugins(job)
    if info is None:
        print(f"Plugin '{args.plugin_id}' not found.")
        sys.exit(1)

    for key in ("id", "name", "version", "author", "basename", "source", "state", "enabled", "error"):
        print(f"  {key + ':':<12} {info[key]}")
    if info["meta"]:
        print(f"  {'meta:':<12} {json.dumps(info['meta'], ensure_ascii=False)}")
    print(f"  {'settings:':<12} {json.dumps(info['config'], ensure_ascii=False)}")
    if info["missing_settings"]:
        print(f"  {'missing:':<12} {', '.join(info['missing_settings'])}")


def _set_enabled(plugin_id: str, enabled: bool):
    manager = get_manager()
    asyncio.run(manager.load_all())
    if plugin_id not in manager.registry:
        print(f"Plugin '{plugin_id}' not found.")
        sys.exit(1)
    manager.settings.set_enabled(plugin_id, enabled)
    asyncio.run(manager.stop_all())
    print(f"Plugin '{plugin_id}' {'enabled' if enabled else 'disabled'}. Restart the service to take effect.")


def cmd_enable(args):
    _set_enabled(args.plugin_id, True)


def cmd_disable(args):
    _set_enabled(args.plugin_id, False)


def cmd_check(args):
    """Ask every enabled plugin's repository for a newer version."""

    async def job(manager):
        return await manager.check_updates(force_check=args.force)

    transient = run_with_plugins(job)
    if not transient.checked:
        print("No plugins started.")
        return

    for basename, version in transient.checked.items():
        if basename in transient.response:
            update = transient.response[basename]
            print(f"{basename}: {version} -> {update.new_version} ({update.package})")
        elif basename in transient.no_update:
            print(f"{basename}: {version} is up to date")
        else:
            print(f"{basename}: {version} (no update information)")


def cmd_doctor(args):
    """Check that every enabled plugin starts and has the settings it needs."""

    async def job(manager):
        issues = []
        if not PLUGIN_CONFIG_FILE.exists():
            issues.append(f"Plugin settings file missing: {PLUGIN_CONFIG_FILE}")
        for plugin_id in manager.settings.enabled_ids():
            if plugin_id not in manager.registry:
                issues.append(f"Enabled plugin '{plugin_id}' is not installed")
        for instance in manager.registry:
            if not instance.enabled:
                continue
            if instance.error:
                issues.append(f"Plugin '{instance.id}' failed to start: {instance.error}")
            for key in manager.missing_settings(instance):
                issues.append(f"Plugin '{instance.id}': missing setting '{key}'")
        return issues, len(manager.registry)

    issues, installed = run_with_plugins(job)
    if issues:
        print(f"Found {len(issues)} issue(s):")
        for i, issue in enumerate(issues, 1):
            print(f"  {i}. {issue}")
        sys.exit(1)
    print(f"All checks passed. {installed} plugin(s) installed.")


def main():
    parser = argparse.ArgumentParser(description="Plugin Update Service - plugin tool")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("list", help="List installed plugins")

    for name, help_text in (
        ("info", "Show plugin details"),
        ("enable", "Enable a plugin"),
        ("disable", "Disable a plugin"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("plugin_id", help="Plugin ID")

    check_parser = subparsers.add_parser("check", help="Check enabled plugins for updates")
    check_parser.add_argument("--force", action="store_true", help="Bypass cached update data")

    subparsers.add_parser("doctor", help="Check plugin settings and startup")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    commands = {
        "list": cmd_list,
        "info": cmd_info,
        "enable": cmd_enable,
        "disable": cmd_disable,
        "check": cmd_check,
        "doctor": cmd_doctor,
    }
    commands[args.command](args)


if __name__ == "__main__":
    main()
