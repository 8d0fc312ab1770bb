"""Directed graph primitives."""

from monopack.graph.directed_graph import DirectedGraph, GraphNode

__all__ = ["DirectedGraph", "GraphNode"]
