"""
Package information utility.

This module provides a command-line utility for displaying
information about the loom installation and environment.
"""

import sys
import platform
from typing import Dict, Any

import yaml

import loom


def get_system_info() -> Dict[str, Any]:
    """
    Get system information relevant to loom.

    Returns:
        Dictionary containing system information
    """
    return {
        'python_version': sys.version,
        'platform': platform.platform(),
        'architecture': platform.architecture(),
        'yaml_version': yaml.__version__,
        'yaml_libyaml': getattr(yaml, '__with_libyaml__', False),
    }


def get_loom_info() -> Dict[str, Any]:
    """
    Get loom-specific information.

    Returns:
        Dictionary containing loom information
    """
    from loom.codegen import list_languages
    from loom.utils.config import get_config
    from loom.utils.source_registry import get_source_registry

    info = {
        'version': loom.__version__,
        'author': loom.__author__,
        'languages': list_languages(),
    }

    try:
        config = get_config()
        info['config_file'] = str(config.config_file) if config.config_file else None
        info['debug_enabled'] = config.is_debug_enabled()
        info['default_language'] = config.template.default_language
    except loom.ConfigurationError as e:
        info['config_error'] = str(e)

    registry = get_source_registry()
    info['staging_dir'] = str(registry.staging_dir)
    info['registered_sources'] = len(registry)

    return info


def print_info() -> None:
    """Print formatted information about loom and the system."""
    print("loom Text Template Engine")
    print("=" * 40)

    # loom information
    loom_info = get_loom_info()
    print(f"\nloom Version: {loom_info['version']}")
    print(f"Author: {loom_info['author']}")
    print(f"Languages: {', '.join(loom_info['languages'])}")

    if 'config_error' in loom_info:
        print(f"Configuration Error: {loom_info['config_error']}")
    else:
        print(f"Configuration File: {loom_info['config_file'] or 'defaults'}")
        print(f"Default Language: {loom_info['default_language']}")
        print(f"Debug Enabled: {loom_info['debug_enabled']}")

    print(f"Source Staging Directory: {loom_info['staging_dir']}")

    # System information
    system_info = get_system_info()
    print(f"\nPython Version: {system_info['python_version'].split()[0]}")
    print(f"Platform: {system_info['platform']}")
    print(f"Architecture: {system_info['architecture'][0]}")
    print(f"PyYAML Version: {system_info['yaml_version']} (libyaml: {system_info['yaml_libyaml']})")


def main() -> None:
    """Main entry point for the loom-info command."""
    try:
        print_info()
    except Exception as e:
        print(f"Error getting system information: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
