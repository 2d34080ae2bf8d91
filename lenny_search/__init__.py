"""
Lenny's Podcast search - multi-field BM25 over episode transcripts, served as MCP tools.

Modules:
- bm25: tokenizer, field weights, index builder, scorer
- data: episode/topic corpus loading
- transcripts: speaker segments, phrase search, excerpts
- advice / perspectives / insights: views built on top of ranked results
- knowledge / knowledge_extraction / knowledge_build: optional LLM knowledge layer
- server: FastMCP stdio server
"""

__version__ = "1.0.0"
