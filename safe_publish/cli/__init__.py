"""Command line interface for safe-publish"""
