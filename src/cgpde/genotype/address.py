"""
CGP Address Module

Input genes and output genes store a single integer address:
addresses [0, num_inputs) refer to sample inputs, addresses
[num_inputs, num_inputs + num_nodes) refer to node outputs.
This module provides the tagged form of an address used at API boundaries.

Classes:
    InputRef: Reference to a sample input
    NodeRef:  Reference to the output of a node
"""

from dataclasses import dataclass

@dataclass(frozen=True)
class InputRef:
    """Reference to the sample input with the given index."""
    index: int

@dataclass(frozen=True)
class NodeRef:
    """Reference to the output of the node at the given position."""
    index: int

def decode_address(address: int, num_inputs: int) -> InputRef | NodeRef:
    """
    Convert a compact address into an InputRef or a NodeRef.

    Parameters:
        address:    Compact integer address
        num_inputs: Number of chromosome inputs

    Returns:
        The tagged reference
    """
    if address < 0:
        raise ValueError(f"Invalid address: {address}")
    if address < num_inputs:
        return InputRef(address)
    return NodeRef(address - num_inputs)

def encode_address(ref: InputRef | NodeRef, num_inputs: int) -> int:
    """
    Convert an InputRef or NodeRef into its compact integer address.
    """
    if isinstance(ref, InputRef):
        if not 0 <= ref.index < num_inputs:
            raise ValueError(f"Input index {ref.index} out of range")
        return ref.index
    if isinstance(ref, NodeRef):
        if ref.index < 0:
            raise ValueError(f"Node index {ref.index} out of range")
        return ref.index + num_inputs
    raise TypeError(f"Expected InputRef or NodeRef, got {type(ref).__name__}")
