"""
CLI: presentación (typer + rich). La lógica vive en repocfg.core.
"""
