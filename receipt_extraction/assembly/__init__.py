"""
Assembly Package
"""
from .schema_assembler import ReceiptSchemaAssembler

__all__ = ['ReceiptSchemaAssembler']
