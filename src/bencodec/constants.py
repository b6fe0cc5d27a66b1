DIGITS = b"0123456789"

INT_MARKER = b"i"
LIST_MARKER = b"l"
DICT_MARKER = b"d"
END_MARKER = b"e"
LENGTH_SEPARATOR = b":"
MINUS = b"-"

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# len(str(INT64_MAX)), anything longer cannot fit
INT64_MAX_DIGITS = 19

DEFAULT_MAX_DEPTH = 128
