"""Dependency graph construction.

Everything downstream (chains, CPM, milestones) consumes the FeatureGraph built
here, so all structural checks on the input happen in this package.
"""
