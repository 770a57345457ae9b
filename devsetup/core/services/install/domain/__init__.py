"""
L1 Domain — pure logic: errors, checksum parsing, progress, dependency
resolution.
"""
