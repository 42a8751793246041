"""Command Line Interface"""
