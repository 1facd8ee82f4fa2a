"""Clue share codes.

Wire layout (little-endian, self-delimiting):
    [version: u8 = 1]
    [story_count: varint] then per story [len: varint][utf-8 bytes]
    [item_count: varint]  then per item  [story_index: varint][segment_index: varint][digest64: u64]

Text form: ``AKC1-`` + base64url(bytes) without padding.
"""
