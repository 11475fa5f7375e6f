"""Dispatch Desk API"""
