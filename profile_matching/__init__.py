"""Profile matching: tag extraction, embeddings, directional scoring and MMR reranking."""
