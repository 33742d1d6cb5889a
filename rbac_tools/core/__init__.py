"""Core configuration, logging, errors and metrics"""
