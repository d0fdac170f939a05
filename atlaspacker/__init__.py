"""Texture atlas packer: folders of images in, one power-of-two sheet and descriptor out."""

__version__ = "0.1.0"
