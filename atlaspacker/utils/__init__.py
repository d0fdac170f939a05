"""Helpers shared across the packer."""
