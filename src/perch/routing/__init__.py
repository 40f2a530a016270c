"""Routing — route ids, compiled patterns, and match-order sorting.

Route ids are parsed once per compile into segments and compiled into
anchored regular expressions; the sorter orders the result so the first
matching route is the most specific one.
"""
