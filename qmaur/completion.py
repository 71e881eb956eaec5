"""
Bash completion script generation.

The script is derived from the argparse parser, so new subcommands and
options are picked up without editing a template.
"""

from __future__ import annotations

import argparse


def _option_strings(parser: argparse.ArgumentParser) -> list[str]:
    opts: list[str] = []
    for action in parser._actions:
        opts.extend(action.option_strings)
    return opts


def _subcommands(parser: argparse.ArgumentParser) -> dict[str, argparse.ArgumentParser]:
    for action in parser._actions:
        if isinstance(action, argparse._SubParsersAction):
            return dict(action.choices)
    return {}


def _choices(parser: argparse.ArgumentParser) -> dict[str, list[str]]:
    """Options that take a fixed set of values."""
    found: dict[str, list[str]] = {}
    for action in parser._actions:
        if action.option_strings and action.choices:
            for opt in action.option_strings:
                found[opt] = [str(choice) for choice in action.choices]
    return found


def _path_options(parser: argparse.ArgumentParser) -> list[str]:
    """Options whose value is a file path (declared with metavar PATH)."""
    found: list[str] = []
    for action in parser._actions:
        if action.option_strings and action.metavar == "PATH":
            found.extend(action.option_strings)
    return found


def generate_bash_completion(parser: argparse.ArgumentParser) -> str:
    """Build a bash completion script for the given parser.

    Args:
        parser: Top-level argument parser with subcommands

    Returns:
        Script text suitable for ``source`` or /usr/share/bash-completion
    """
    prog = parser.prog
    func = "_" + prog.replace("-", "_")
    subcommands = _subcommands(parser)
    global_opts = _option_strings(parser)

    value_cases: dict[str, list[str]] = dict(_choices(parser))
    path_opts = _path_options(parser)
    for sub in subcommands.values():
        value_cases.update(_choices(sub))
        path_opts.extend(o for o in _path_options(sub) if o not in path_opts)

    lines = [
        f"# bash completion for {prog}",
        f"{func}() {{",
        "    local cur prev cmd i",
        "    COMPREPLY=()",
        '    cur="${COMP_WORDS[COMP_CWORD]}"',
        '    prev="${COMP_WORDS[COMP_CWORD-1]}"',
        '    cmd=""',
        "",
        "    for ((i = 1; i < COMP_CWORD; i++)); do",
        '        case "${COMP_WORDS[i]}" in',
        f"            {'|'.join(subcommands) or '__none__'})",
        '                cmd="${COMP_WORDS[i]}"',
        "                break",
        "                ;;",
        "        esac",
        "    done",
        "",
    ]

    if value_cases or path_opts:
        lines.append('    case "${prev}" in')
        if path_opts:
            lines.extend([
                f"        {'|'.join(path_opts)})",
                '            COMPREPLY=($(compgen -f -- "${cur}"))',
                "            return 0",
                "            ;;",
            ])
        for opt, values in sorted(value_cases.items()):
            lines.extend([
                f"        {opt})",
                f'            COMPREPLY=($(compgen -W "{" ".join(values)}" -- "${{cur}}"))',
                "            return 0",
                "            ;;",
            ])
        lines.extend(["    esac", ""])

    lines.append('    case "${cmd}" in')
    for name, sub in subcommands.items():
        lines.extend([
            f"        {name})",
            f'            COMPREPLY=($(compgen -W "{" ".join(_option_strings(sub))}" -- "${{cur}}"))',
            "            ;;",
        ])
    top_words = " ".join(global_opts + list(subcommands))
    lines.extend([
        "        *)",
        f'            COMPREPLY=($(compgen -W "{top_words}" -- "${{cur}}"))',
        "            ;;",
        "    esac",
        "    return 0",
        "}",
        "",
        f"complete -F {func} -o bashdefault -o default {prog}",
        "",
    ])
    return "\n".join(lines)
