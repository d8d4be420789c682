"""Core domain package for sigexport.

Core contains mention parsing, mention insertion, and the export flow without
any Signal Desktop or export database specific code, keeping the business
logic portable.
"""
