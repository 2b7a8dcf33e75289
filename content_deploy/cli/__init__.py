"""Command line interface for content-deploy"""
