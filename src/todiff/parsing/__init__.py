"""todo.txt line parsing."""

from todiff.parsing.line_parser import parse_date, parse_line, parse_lines

__all__ = ["parse_line", "parse_lines", "parse_date"]
