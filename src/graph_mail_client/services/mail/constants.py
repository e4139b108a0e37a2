# Delta query
CHANGE_TYPE_CREATED = "created"
ODATA_NEXT_LINK = "@odata.nextLink"
ODATA_DELTA_LINK = "@odata.deltaLink"
ODATA_TYPE = "@odata.type"
ODATA_REMOVED = "@removed"
MAX_DELTA_PAGES = 10000

# Attachment kinds
FILE_ATTACHMENT_TYPE = "#microsoft.graph.fileAttachment"

# Message composition
BODY_TYPE_HTML = "html"
BODY_TYPE_TEXT = "text"
MAX_SUBJECT_LENGTH = 998  # RFC 2822 practical limit
MAX_BODY_LENGTH = 4000000  # sendMail JSON payload limit is ~4MB
