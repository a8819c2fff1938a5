"""Shell integration snippets printed by `zjump init`.

The snippet defines the jump function (named after cfg.cmd) and, unless
cfg.install_hook is off, a prompt hook that records every directory change:

    eval "$(zjump init bash)"     # ~/.bashrc
    eval "$(zjump init zsh)"      # ~/.zshrc
"""

from __future__ import annotations

import re
import shlex
import shutil
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from zjump.config import ZConfig

SHELLS = ("bash", "zsh")

# Used when the zjump console script is not on PATH (e.g. an unactivated venv).
_MODULE_COMMAND = f"{shlex.quote(sys.executable)} -m zjump"

_VALID_CMD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

_JUMP_FUNCTION = """\
@CMD@() {
    local _zjump_dir _zjump_arg
    if [ $# -eq 0 ]; then
        @ZJUMP@ query --list
        return
    fi
    for _zjump_arg in "$@"; do
        case "$_zjump_arg" in
            --) break ;;
            --list|-l|-[!-]*l*)
                @ZJUMP@ query "$@"
                return
                ;;
        esac
    done
    _zjump_dir="$(@ZJUMP@ query "$@")" || return
    [ -n "$_zjump_dir" ] && builtin cd -- "$_zjump_dir"
}
"""

_BASH_HOOK = """\
_zjump_hook() {
    (@ZJUMP@ add "$PWD" >/dev/null 2>&1 &)
}
case ";${PROMPT_COMMAND:-};" in
    *";_zjump_hook;"*) ;;
    *) PROMPT_COMMAND="_zjump_hook${PROMPT_COMMAND:+;$PROMPT_COMMAND}" ;;
esac
"""

_BASH_COMPLETION = """\
_zjump_complete() {
    local IFS=$'\\n'
    COMPREPLY=($(@ZJUMP@ complete -- "${COMP_WORDS[@]:1}"))
}
complete -o filenames -F _zjump_complete @CMD@
"""

_ZSH_HOOK = """\
_zjump_hook() {
    (@ZJUMP@ add "@ZSH_PWD@" >/dev/null 2>&1 &)
}
[[ -n "${precmd_functions[(r)_zjump_hook]}" ]] || precmd_functions+=(_zjump_hook)
"""

_ZSH_COMPLETION = """\
_zjump_zsh_complete() {
    local compl
    read -l compl
    reply=(${(f)"$(@ZJUMP@ complete -- ${${(z)compl}[2,-1]})"})
}
compctl -U -K _zjump_zsh_complete @CMD@
"""


def zjump_command() -> str:
    """Command line the snippet uses to call back into zjump."""
    return "command zjump" if shutil.which("zjump") else _MODULE_COMMAND


def render_init(shell: str, cfg: ZConfig, command: str | None = None) -> str:
    """Return the integration snippet for `shell`."""
    if shell not in SHELLS:
        msg = f"unsupported shell {shell!r} (expected one of: {', '.join(SHELLS)})"
        raise ValueError(msg)
    if not _VALID_CMD_RE.match(cfg.cmd):
        msg = f"invalid command name {cfg.cmd!r}"
        raise ValueError(msg)

    parts = [_JUMP_FUNCTION]
    if cfg.install_hook:
        parts.append(_BASH_HOOK if shell == "bash" else _ZSH_HOOK)
    parts.append(_BASH_COMPLETION if shell == "bash" else _ZSH_COMPLETION)

    text = "\n".join(parts)
    # :A follows symlinks, :a only makes the path absolute.
    text = text.replace("@ZSH_PWD@", "${PWD:A}" if cfg.resolve_symlinks else "${PWD:a}")
    return text.replace("@CMD@", cfg.cmd).replace("@ZJUMP@", command or zjump_command())
