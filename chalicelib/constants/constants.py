ROLE_STANDARD = 'standard'
ROLE_PLATFORM_ADMIN = 'platform-admin'
ROLES = (ROLE_STANDARD, ROLE_PLATFORM_ADMIN)

PLATFORM_RESTAURANT_NAME = 'Platform Management'

MENU_ITEM_CATEGORIES = ('appetizer', 'main', 'dessert', 'drink')

IMAGE_FIELD_NAME = 'image'
MAX_IMAGE_SIZE = 5 * 1024 * 1024
ALLOWED_IMAGE_CONTENT_TYPES = ('image/jpeg', 'image/jpg', 'image/png')
ALLOWED_IMAGE_EXTENSIONS = ('.jpeg', '.jpg', '.png')
ALLOWED_IMAGE_FORMATS = ('JPEG', 'PNG')
UPLOADS_KEY_PREFIX = 'uploads'

DEFAULT_TOKEN_EXPIRATION_HOURS = 24
DEFAULT_BCRYPT_ROUNDS = 12
TOKEN_ALGORITHM = 'HS256'

MULTIPART_FORM_DATA = 'multipart/form-data'
APPLICATION_JSON = 'application/json'
