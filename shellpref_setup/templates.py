"""
Embedded configuration payloads.

One zshrc template covers every shell variant; ShellOptions selects between
them. Placeholders are literal @NAME@ tokens.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

AUTOSUGGEST_STRATEGIES = ("history", "history completion")

FZF_BINDING_CANDIDATES: tuple[Path, ...] = (
    Path("/usr/share/doc/fzf/examples/key-bindings.zsh"),
    Path("/usr/share/fzf/key-bindings.zsh"),
    Path("/usr/share/fzf/shell/key-bindings.zsh"),
)


@dataclass(frozen=True)
class ShellOptions:
    autosuggest_strategy: str = "history completion"
    popup_completion: bool = False

    def __post_init__(self) -> None:
        if self.autosuggest_strategy not in AUTOSUGGEST_STRATEGIES:
            known = ", ".join(repr(s) for s in AUTOSUGGEST_STRATEGIES)
            raise ValueError(f"autosuggest_strategy must be one of {known}, got {self.autosuggest_strategy!r}")


POPUP_COMPLETION_BLOCK = """\
# interactive popup menu, arrow keys move through candidates
zstyle ':completion:*' menu select
bindkey -M menuselect '^[[Z' reverse-menu-complete"""

ZSHRC_TEMPLATE = r"""
# ===== PATH fixes for Debian names =====
export PATH="@BIN_DIR@:$PATH"

# ===== history: useful, shared, not dumb =====
HISTFILE="$HOME/.zsh_history"
HISTSIZE=500000
SAVEHIST=500000
setopt HIST_IGNORE_ALL_DUPS HIST_FIND_NO_DUPS HIST_REDUCE_BLANKS HIST_VERIFY
setopt INC_APPEND_HISTORY SHARE_HISTORY EXTENDED_HISTORY

# ===== completion: fast and not annoying =====
autoload -U compinit; compinit -u
zmodload zsh/complist
setopt MENU_COMPLETE AUTO_MENU COMPLETE_IN_WORD
# case-insensitive, smart separators
zstyle ':completion:*' matcher-list 'm:{a-z}={A-Za-z}' 'r:|[._-]=* r:|=*'
# show descriptions and group results
zstyle ':completion:*' verbose yes
zstyle ':completion:*' group-name ''
# colorize completion using LS_COLORS
zstyle ':completion:*:default' list-colors ${(s.:.)LS_COLORS}
@POPUP_COMPLETION@

# ===== quality-of-life =====
setopt AUTO_CD AUTO_PUSHD PUSHD_SILENT PUSHD_IGNORE_DUPS
setopt EXTENDED_GLOB
bindkey -e

# Make word boundaries sane for paths/flags: keep _ in words; treat /. - as separators
WORDCHARS='*?[]~=&;!#$%^(){}<>'

# ===== plugins =====
if [ -f /usr/share/zsh-autosuggestions/zsh-autosuggestions.zsh ]; then
  source /usr/share/zsh-autosuggestions/zsh-autosuggestions.zsh
  ZSH_AUTOSUGGEST_STRATEGY=(@AUTOSUGGEST_STRATEGY@)
fi
if [ -f /usr/share/zsh-syntax-highlighting/zsh-syntax-highlighting.zsh ]; then
  source /usr/share/zsh-syntax-highlighting/zsh-syntax-highlighting.zsh
fi

# ===== fzf (Ctrl-R history, Ctrl-T files) =====
if [ -f /usr/share/doc/fzf/examples/key-bindings.zsh ]; then
  source /usr/share/doc/fzf/examples/key-bindings.zsh
elif [ -f /usr/share/fzf/key-bindings.zsh ]; then
  source /usr/share/fzf/key-bindings.zsh
elif [ -f /usr/share/fzf/shell/key-bindings.zsh ]; then
  source /usr/share/fzf/shell/key-bindings.zsh
fi
export FZF_DEFAULT_COMMAND='fd --type f --hidden --follow --exclude .git'
export FZF_CTRL_T_COMMAND="$FZF_DEFAULT_COMMAND"
export FZF_DEFAULT_OPTS='--height 40% --layout=reverse --border'

# ===== zoxide (better cd) =====
eval "$(zoxide init zsh)"

# ===== modern defaults =====
command -v bat >/dev/null 2>&1 && alias cat='bat --paging=never'
if command -v eza >/dev/null 2>&1; then
  alias ls='eza --group-directories-first --icons=auto -F'
elif command -v exa >/dev/null 2>&1; then
  alias ls='exa --group-directories-first --icons -F'
else
  alias ls='ls --color=auto -F'
fi
alias grep='rg --hidden --smart-case'

# ===== prompt =====
@THEME_SOURCE@
[[ -r "$HOME/.p10k.zsh" ]] && source "$HOME/.p10k.zsh"

# ===== keybindings that should be default =====
# Up/Down: prefix-aware history search (built-ins, no autoload drama)
bindkey '^[[A' history-search-backward
bindkey '^[[B' history-search-forward

# Home/End
bindkey '^[[H' beginning-of-line
bindkey '^[[F' end-of-line

# Word-wise navigation across common escape sequences
bindkey '^[\[1;5D' backward-word   # Ctrl+Left
bindkey '^[\[1;5C' forward-word    # Ctrl+Right
bindkey '^[b'      backward-word   # Alt+b fallback
bindkey '^[f'      forward-word    # Alt+f fallback
bindkey '^[\[1;3D' backward-word   # Alt+Left
bindkey '^[\[1;3C' forward-word    # Alt+Right

# Kill words like modern editors
bindkey '^[d'      kill-word                 # Alt+d
bindkey '^H'       backward-kill-word        # Ctrl+Backspace (common)
bindkey '^?'       backward-kill-word        # Backspace-as-DEL variant
bindkey '^[\[3;5~' kill-word                 # Ctrl+Delete
bindkey '^[\[3~'   delete-char               # Delete

# Yank (paste) convenience
bindkey '^Y' yank
"""

KITTY_CONF = r"""
# Font
font_family      MesloLGS Nerd Font
font_size        13.0
bold_font        auto
italic_font      auto
bold_italic_font auto

# Window & aesthetics
hide_window_decorations no
window_padding_width 10
background_opacity 0.9
cursor_shape beam
enable_audio_bell no
copy_on_select yes
strip_trailing_spaces smart
mouse_hide_wait_interval 0.5

# Right-click paste, middle-click primary selection
paste_on_middle_click yes
map right_click paste_from_clipboard

# Ctrl+V pastes; Ctrl+C copies selection or sends SIGINT if none
map ctrl+v paste_from_clipboard
map ctrl+shift+v paste_from_selection
map ctrl+c copy_or_interrupt

# Tabs
tab_bar_style powerline
tab_powerline_style angled
tab_bar_min_tabs 2
active_tab_font_style bold
inactive_tab_font_style normal

# Dracula colors
background #282a36
foreground #f8f8f2
selection_background #44475a
color0 #21222c
color1 #ff5555
color2 #50fa7b
color3 #f1fa8c
color4 #bd93f9
color5 #ff79c6
color6 #8be9fd
color7 #f8f8f2
color8 #6272a4
color9 #ff6e6e
color10 #69ff94
color11 #ffffa5
color12 #d6acff
color13 #ff92df
color14 #a4ffff
color15 #ffffff
"""


def shell_path(path: Path, home: Path) -> str:
    """Render `path` for a shell file, using $HOME when it lives under `home`."""
    try:
        rel = path.relative_to(home)
    except ValueError:
        return str(path)
    if str(rel) == ".":
        return "$HOME"
    return f"$HOME/{rel.as_posix()}"


def render_zshrc(
    options: ShellOptions,
    *,
    bin_dir: str = "$HOME/.local/bin",
    theme_dir: str | None = "$HOME/.p10k",
) -> str:
    """Render ~/.zshrc. With `theme_dir=None` the theme is not sourced at all."""
    popup = POPUP_COMPLETION_BLOCK if options.popup_completion else ""
    theme = f'source "{theme_dir}/powerlevel10k.zsh-theme"\n' if theme_dir is not None else ""
    text = ZSHRC_TEMPLATE.lstrip("\n")
    return (
        text.replace("@AUTOSUGGEST_STRATEGY@", options.autosuggest_strategy)
        .replace("@POPUP_COMPLETION@\n", popup + "\n" if popup else "")
        .replace("@THEME_SOURCE@\n", theme)
        .replace("@BIN_DIR@", bin_dir)
    )


def render_kitty_conf() -> str:
    return KITTY_CONF.lstrip("\n")


def find_fzf_bindings(candidates: Sequence[Path] = FZF_BINDING_CANDIDATES) -> Path | None:
    for candidate in candidates:
        if candidate.is_file():
            return candidate
    return None
