"""Story content: segment model, preparation, digests, and the provider seam."""
