"""Shared utilities: configuration, logging and exceptions"""
