"""HTTP types: immutable requests, chainable responses, the response writer."""
