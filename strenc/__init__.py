# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
StrEnc: turn lines of text into numeric features.

Token-id sequences, bag-of-words counts and TF-IDF weights, all built on one
incrementally grown token dictionary. The encoder lives in
`strenc.encoding.engine.core`; the CLI entrypoint is `strenc`.
"""

__version__ = "0.1.0"
