BASE_PATH = "/services/rest/"
METHOD_PREFIX = "flickr."

REQUEST_TOKEN_URL = "https://www.flickr.com/services/oauth/request_token"
AUTHORIZE_URL = "https://www.flickr.com/services/oauth/authorize"
ACCESS_TOKEN_URL = "https://www.flickr.com/services/oauth/access_token"

# Poll interval bounds in milliseconds
MIN_POLL_INTERVAL = 20 * 1000
DEFAULT_POLL_INTERVAL = 5 * 60 * 1000


class TypeName:
    USER = "user_id"
    SET = "photoset_id"
    PHOTO = "photo_id"


class Status:
    OKAY = "ok"
    FAILED = "fail"


class Method:
    COLLECTIONS = "collections.getTree"

    class Photo:
        EXIF = "photos.getExif"
        INFO = "photos.getInfo"
        SEARCH = "photos.search"
        SETS = "photos.getAllContexts"
        SIZES = "photos.getSizes"
        TAGS = "tags.getListUserRaw"

    class Set:
        INFO = "photosets.getInfo"
        PHOTOS = "photosets.getPhotos"


class Extra:
    DESCRIPTION = "description"
    TAGS = "tags"
    DATE_TAKEN = "date_taken"
    DATE_UPDATED = "last_update"
    LOCATION = "geo"
    PATH_ALIAS = "path_alias"


class Sort:
    RELEVANCE = "relevance"
