"""
Core RAG pipeline package for the Knowledge Base Assistant.
"""

from core.pipeline import KnowledgeQAPipeline

__all__ = ["KnowledgeQAPipeline"]
