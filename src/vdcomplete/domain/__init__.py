"""Domain layer - positions, documents, completion types and errors.

This layer contains:
- positions: Editor, root and virtual coordinates plus token spans
- documents: Virtual documents and the regions they occupy in the root document
- completion: Requests, items, replies and trigger kinds
- errors: The completion error taxonomy
- protocols: Interfaces for editors and completion backends

The domain layer has NO dependencies on application, infrastructure, or presentation layers.
All other layers depend on the domain layer.
"""
