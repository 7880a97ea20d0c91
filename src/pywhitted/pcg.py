# -*- encoding: utf-8 -*-
#
# The MIT License (MIT)
#
# Copyright © 2021 Maurizio Tomasi
#
# Permission is hereby granted, free of charge, to any person obtaining a copy of this software and associated
# documentation files (the “Software”), to deal in the Software without restriction, including without limitation the
# rights to use, copy, modify, merge, publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all copies or substantial portions of
# the Software. THE SOFTWARE IS PROVIDED “AS IS”, WITHOUT WARRANTY OF ANY KIND, EXPRESS OR IMPLIED, INCLUDING BUT NOT
# LIMITED TO THE WARRANTIES OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT
# SHALL THE AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN ACTION OF
# CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS

from dataclasses import dataclass

# Python integers are unbounded, so every update of the state is masked explicitly
MASK_32 = (1 << 32) - 1
MASK_64 = (1 << 64) - 1

MULTIPLIER = 6364136223846793005


@dataclass
class PCG:
    """Permuted congruential generator (PCG32)

    `state` is the 64-bit state of the underlying linear congruential generator, `inc` is its
    (odd) increment. Different values of `init_seq` select different, non-overlapping streams.

    Area lights use it to jitter their samples. Pass the same `init_state` and `init_seq`
    to get the same sequence of numbers, and thus the same soft shadows, over and over."""

    state: int = 0
    inc: int = 0

    def __init__(self, init_state=42, init_seq=54):
        self.state = 0
        self.inc = ((init_seq << 1) | 1) & MASK_64
        self.random()
        self.state = (self.state + init_state) & MASK_64
        self.random()

    def random(self) -> int:
        """Return a 32-bit unsigned integer and advance the state"""
        old = self.state
        self.state = (old * MULTIPLIER + self.inc) & MASK_64

        # Output permutation: xorshift the high bits, then rotate by the top five bits
        word = (((old >> 18) ^ old) >> 27) & MASK_32
        rotation = old >> 59
        return ((word >> rotation) | (word << (-rotation & 31))) & MASK_32

    def random_float(self) -> float:
        """Return a number uniformly distributed over [0, 1]"""
        return self.random() / MASK_32

    def split(self, seq: int) -> "PCG":
        """Return an independent generator for the stream `seq`

        The new generator depends only on the current state of this one and on `seq`;
        the state of this generator is not modified."""
        return PCG(init_state=self.state, init_seq=seq)
