"""OCCI protocol codec.

Key Responsibilities:
    - Decode ``text/occi`` headers and ``application/occi+json`` bodies into
      normalized :class:`~occi_codec.models.request.InputData` values
    - Render entities, locations, messages and the ``/-/`` discovery document
      into both wire formats

Collaborators:
    - Upstream: The HTTP transport selects a codec pair through
      :func:`occi_codec.presentation.negotiation.codec_for`
    - Downstream: A domain model store implementing
      :class:`occi_codec.models.collaborators.DomainModel`

Thread Safety:
    - Thread-safe: parsers and presenters hold no per-request state

Example:
    >>> from occi_codec.presentation.text_occi import TextOcciParser
    >>> parser = TextOcciParser()
    >>> data = parser.parse_headers(
    ...     {"Category": 'compute; scheme="http://schemas.ogf.org/occi/infrastructure#"; class="kind"'}
    ... )
    >>> data.kind
    'http://schemas.ogf.org/occi/infrastructure#compute'
"""

__version__ = "1.0.0"
