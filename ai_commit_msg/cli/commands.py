"""CLI Commands"""

import os
import sys

from ai_commit_msg.config import ConfigManager
from ai_commit_msg.output import bold, dim, info


def display_config(manager: ConfigManager | None = None) -> int:
    """Display current configuration."""
    manager = manager or ConfigManager()
    config = manager.load()
    config_path = manager.get_config_path()

    print(f"\n{bold('Current Configuration')}\n")

    if config_path:
        print(f"  {dim('Loaded from:')} {config_path}")
    else:
        print(f"  {dim('Loaded from:')} defaults (no {manager.CONFIG_FILENAME} found)")

    env = manager.env_overrides()
    if env:
        print(f"  {dim('Environment overrides:')}")
        for var, key in manager.ENV_OVERRIDES.items():
            if key in env:
                print(f"    {var}={env[key]}")

    spinner = ''.join(config.spinner_frames) or 'off'
    print()
    print(f"  {bold('Settings:')}")
    print(f"    provider:         {info(config.provider)}")
    print(f"    model:            {info(config.model)}")
    print(f"    temperature:      {info(str(config.temperature))}")
    print(f"    max_tokens:       {info(str(config.max_tokens or 'provider default'))}")
    print(f"    reasoning_effort: {info(config.reasoning_effort or 'off')}")
    print(f"    context_lines:    {info(str(config.context_lines if config.context_lines is not None else 'git default'))}")
    print(f"    notifications:    {info(str(config.notifications).lower())}")
    print(f"    spinner:          {info(spinner)}")
    print(f"    cost_display:     {info(config.cost_display)}")

    print(f"\n  {dim('Config locations:')}")
    print(f"    Local:  {manager.CONFIG_FILENAME} (in current directory)")
    print(f"    Global: ~/{manager.CONFIG_FILENAME}\n")

    return 0


def run_install_completion() -> int:
    """Install shell tab completion."""
    shell = os.environ.get('SHELL', '')

    print(f"\n{bold('Tab Completion Setup')}\n")

    if 'zsh' in shell or 'bash' in shell:
        rc_file = os.path.expanduser('~/.zshrc' if 'zsh' in shell else '~/.bashrc')
        line = 'eval "$(register-python-argcomplete aicommit)"'
        print(f"Add this line to {dim(rc_file)}:\n")
        print(f"  {line}\n")
        print(f"Then run: {dim('source ' + rc_file)}")
    elif sys.platform == 'win32':
        print("For PowerShell, run:\n")
        print("  register-python-argcomplete --shell powershell aicommit | Out-String | Invoke-Expression\n")
        print("To make it permanent, add it to your $PROFILE.")
    else:
        print("Run one of these based on your shell:\n")
        print(f"  {dim('# Bash/Zsh')}")
        print('  eval "$(register-python-argcomplete aicommit)"\n')
        print(f"  {dim('# Fish')}")
        print("  register-python-argcomplete --shell fish aicommit | source")

    print(f"\n{dim('After setup, press TAB to autocomplete flags.')}")
    return 0
