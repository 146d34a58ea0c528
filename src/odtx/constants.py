"""
Names and defaults shared by the document views and the archive layer.
"""

ODT_MIMETYPE = "application/vnd.oasis.opendocument.text"

CONTENT_ENTRY = "content.xml"
MIMETYPE_ENTRY = "mimetype"
MANIFEST_ENTRY = "META-INF/manifest.xml"

# Directory placeholder some writers emit; it is dropped on save.
MEDIA_PLACEHOLDER_ENTRY = "media/"
MEDIA_PREFIX = "media/"

DEFAULT_RUN_STYLE = "RegText"
DEFAULT_PARAGRAPH_STYLE = "P1"

# Parent styles linked from automatic paragraph / text styles
PARAGRAPH_PARENT_STYLE = "RegPar"
RUN_PARENT_STYLE = "RegParText"

DEFAULT_IMAGE_WIDTH = "2.70833in"
DEFAULT_IMAGE_HEIGHT = "1.35833in"
