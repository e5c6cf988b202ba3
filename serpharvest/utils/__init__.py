"""Utility modules for serpharvest."""
