from pygments.style import Style
from pygments.token import Keyword, Name, Number, Punctuation, String


class LogStyle(Style):
    """Muted palette for the JSON `extra` trailer of log lines"""

    styles = {
        Name.Tag: "#5fafd7",
        String: "#87af5f",
        Number: "#d7af5f",
        Keyword.Constant: "#af87d7",
        Punctuation: "#808080",
    }
