"""Конвейер построения запроса: validator, negotiator, encoder, assembler, router."""
