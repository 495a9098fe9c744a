"""Shared test doubles"""
