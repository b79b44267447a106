"""Operator tooling for Todo Keeper."""
