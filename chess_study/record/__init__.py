"""
Game Record Module

Import and export of the PGN-style game record format.

Supported input:
    [Tag "value"]     tag pairs ([FEN] sets the start position)
    12. / 12...       move numbers
    Nf3 e8=Q+ O-O     SAN moves, with !, ?, !!, ??, !?, ?! suffixes
    $1                numeric annotation glyphs
    {text}            comments
    ( ... )           variations
    1-0 0-1 1/2-1/2 * results

Anything else is a ParseError pointing at the offending token.
Output is written by python-chess and is standard PGN.
"""

from chess_study.record.exporter import export_tree, tree_to_game
from chess_study.record.parser import GameRecord, RecordMove, RecordParser, split_records
from chess_study.record.tokenizer import SUFFIX_NAGS, Token, tokenize

__all__ = [
    'GameRecord',
    'RecordMove',
    'RecordParser',
    'SUFFIX_NAGS',
    'Token',
    'export_tree',
    'split_records',
    'tokenize',
    'tree_to_game',
]
