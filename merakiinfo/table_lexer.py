from pygments.lexer import RegexLexer
from pygments.token import Error, Generic, Keyword, Name, Number, Operator, String, Text, Whitespace

from merakiinfo.utility import DEVICE_STATUSES


class MerakiTableLexer(RegexLexer):
    """Parse meraki-info table output for highlighting."""

    name = 'meraki-info-table'
    aliases = []
    filenames = ['*.merakiinfo']
    tokens = {
        'root': [
            (r'\bERROR\b', Error),
            (r'\b([0-9]{1,3}\.){3}[0-9]{1,3}(/[0-9]{1,2})?\b', Number),   # IPv4 address or CIDR
            (r'\b([0-9a-f]{2}:){5}[0-9a-f]{2}\b', String.Other),          # MAC
            (r'\b[A-Z0-9]{4}-[A-Z0-9]{4}-[A-Z0-9]{4}\b', Name.Constant),  # serial
            (r'\b[LN]_[0-9]+\b', Name.Constant),                          # org or network ID
            (r'\b('+r'|'.join(sorted(DEVICE_STATUSES))+r')\b', Operator.Word),
            (r'\b(true|false|True|False)\b', Keyword.Constant),
            (r'\b[0-9]+\b', Number.Integer),
            (r'^\s*[A-Z][A-Za-z ]+\([0-9]+\)$', Generic.Heading),         # title and count
            (r'^\s+\|', Keyword, 'heading'),                              # push to heading context
            (r'(\+|-{3,}|\|)', Keyword),                                  # borders
            (r'\b[\w-]+\b', String),
            (r'\s+', Whitespace),
            (r'.', Text),
        ],
        'heading': [
            (r'\b([\w]+)\b', Generic.Subheading),                         # column headings
            (r'(\+|-{3,}|\|)', Keyword),                                  # borders
            (r'\n', Keyword, '#pop'),
            (r'[ \t]+', Whitespace),
        ],
    }
