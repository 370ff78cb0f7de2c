from __future__ import annotations

import pygments
from pygments.lexers.shell import BashLexer
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import HTML, PygmentsTokens
from prompt_toolkit.styles import Style

from . import __version__


vibe_style = Style.from_dict(
    {
        "prompt": "ansicyan bold",
        "pygments.name.builtin": "ansigreen bold",
        "pygments.literal.string": "#aaffaa",
        "pygments.text": "#ffffff",
    }
)


def _emit(text) -> None:
    print_formatted_text(text, style=vibe_style)


def info(message: str) -> None:
    _emit(HTML("{}").format(message))


def success(message: str) -> None:
    _emit(HTML("<ansigreen>✅ {}</ansigreen>").format(message))


def error(message: str) -> None:
    _emit(HTML("<ansired>❌ {}</ansired>").format(message))


def processing(message: str) -> None:
    _emit(HTML("<ansiblue>⚙️ {}</ansiblue>").format(message))


def thinking(message: str) -> None:
    _emit(HTML("<ansimagenta>🤔 {}</ansimagenta>").format(message))


def hint(message: str) -> None:
    _emit(HTML("<ansiyellow>{}</ansiyellow>").format(message))


def question(message: str) -> None:
    _emit(HTML("<ansicyan>{}</ansicyan>").format(message))


def show_command(cmdline: str) -> None:
    tokens = list(pygments.lex(cmdline, lexer=BashLexer()))
    _emit(PygmentsTokens(tokens))


def banner() -> None:
    _emit(HTML("<b><ansicyan>🎬 Vibedit {}</ansicyan></b> - AI-Powered Video Editor").format(__version__))
    _emit(HTML("<i>Just tell me what you want to do - I'll figure it out!</i>\n"))


EXAMPLES = (
    "Make my vacation video black and white",
    "Convert file3.mp4 to any other video format",
    "Speed up clip.mov by 2.5x",
    "Resize talk.mkv to 1280x720",
    "Extract 45 seconds starting from 2:30",
    "Extract the audio from interview.mp4",
)


def show_examples() -> None:
    _emit(HTML("\n<ansicyan>🎯 Just describe what you want naturally:</ansicyan>"))
    for ex in EXAMPLES:
        _emit(HTML('   "{}"').format(ex))
    _emit(HTML("\n<ansiyellow>🔧 Special commands:</ansiyellow>"))
    _emit(HTML('   "reset api key" - Change your Groq API key'))
    _emit(HTML('   "help"          - Show these examples'))
    _emit(HTML('   "quit"          - Leave vibedit'))
    _emit(HTML("\n<ansimagenta>✨ I understand natural language - no need to memorize commands!</ansimagenta>"))
