from chalice import Chalice

from chalicelib import auth, advertisements, images, menu_items, promotions, users
from chalicelib.constants.constants import MULTIPART_FORM_DATA, APPLICATION_JSON
from chalicelib.utils import app as utils_app

app = Chalice(app_name='restaurant-menu-platform')

app.api.binary_types.insert(0, MULTIPART_FORM_DATA)
app.debug = True

FORM_OR_JSON = [MULTIPART_FORM_DATA, APPLICATION_JSON]


@app.route('/health-check', methods=['GET'], cors=True)
def health_check():
    return {'health': 'check'}


# AUTH
@app.route('/auth/register', methods=['POST'], cors=True)
@utils_app.request_exception_handler
def register():
    return auth.register(app.current_request)


@app.route('/auth/login', methods=['POST'], cors=True)
@utils_app.request_exception_handler
def login():
    return auth.login(app.current_request)


@app.route('/auth/create-superuser', methods=['POST'], cors=True)
@utils_app.request_exception_handler
def create_superuser():
    """
    available only while no platform admin exists
    """
    return auth.create_superuser(app.current_request)


# MENU ITEMS
@app.route('/menu-items', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_menu_items():
    return menu_items.MenuItem.endpoint_get_own(app.current_request)


@app.route('/menu-items', methods=['POST'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def create_menu_item():
    return menu_items.MenuItem.init_request_create(app.current_request).endpoint_create()


@app.route('/menu-items/{menu_item_id}', methods=['PUT'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def update_menu_item(menu_item_id):
    """
    owner or platform admin
    """
    return menu_items.MenuItem.init_request_by_id(app.current_request, menu_item_id).\
        with_request_changes(app.current_request).endpoint_update()


@app.route('/menu-items/{menu_item_id}', methods=['DELETE'], cors=True)
@utils_app.request_exception_handler
def delete_menu_item(menu_item_id):
    """
    owner or platform admin
    """
    return menu_items.MenuItem.init_request_by_id(app.current_request, menu_item_id).endpoint_delete()


# PROMOTIONS
@app.route('/promotions', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_promotions():
    return promotions.Promotion.endpoint_get_own(app.current_request)


@app.route('/promotions', methods=['POST'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def create_promotion():
    return promotions.Promotion.init_request_create(app.current_request).endpoint_create()


@app.route('/promotions/{promotion_id}', methods=['PUT'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def update_promotion(promotion_id):
    return promotions.Promotion.init_request_by_id(app.current_request, promotion_id).\
        with_request_changes(app.current_request).endpoint_update()


@app.route('/promotions/{promotion_id}', methods=['DELETE'], cors=True)
@utils_app.request_exception_handler
def delete_promotion(promotion_id):
    return promotions.Promotion.init_request_by_id(app.current_request, promotion_id).endpoint_delete()


# PUBLIC
@app.route('/public/promotions/{user_id}', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_public_promotions(user_id):
    """
    Authorization is not needed
    """
    return promotions.Promotion.endpoint_get_public(user_id)


@app.route('/public/advertisements/{user_id}', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_public_advertisements(user_id):
    """
    Authorization is not needed
    """
    return advertisements.Advertisement.endpoint_get_public(user_id)


# SUPERUSER: USERS
@app.route('/superuser/users', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_users():
    return users.User.init_request_platform_admin(app.current_request).endpoint_get_all()


@app.route('/superuser/users', methods=['POST'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def create_user():
    """
    created users are always standard
    """
    return users.User.init_request_platform_admin(app.current_request).endpoint_create_user()


@app.route('/superuser/users/{user_id}', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_user(user_id):
    return users.User.init_request_platform_admin(app.current_request, user_id).endpoint_get_user()


@app.route('/superuser/users/{user_id}', methods=['DELETE'], cors=True)
@utils_app.request_exception_handler
def delete_user(user_id):
    """
    cascades to the user's menu items and promotions
    """
    return users.User.init_request_platform_admin(app.current_request, user_id).endpoint_delete_user()


# SUPERUSER: MENU ITEMS
@app.route('/superuser/users/{user_id}/menu-items', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_user_menu_items(user_id):
    return menu_items.MenuItem.endpoint_get_for_user(app.current_request, user_id)


@app.route('/superuser/users/{user_id}/menu-items', methods=['POST'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def create_user_menu_item(user_id):
    return menu_items.MenuItem.init_request_create_for_user(app.current_request, user_id).endpoint_create()


@app.route('/superuser/menu-items/{menu_item_id}', methods=['PUT'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def update_any_menu_item(menu_item_id):
    return menu_items.MenuItem.init_request_by_id_platform_admin(app.current_request, menu_item_id).\
        with_request_changes(app.current_request).endpoint_update()


@app.route('/superuser/menu-items/{menu_item_id}', methods=['DELETE'], cors=True)
@utils_app.request_exception_handler
def delete_any_menu_item(menu_item_id):
    return menu_items.MenuItem.init_request_by_id_platform_admin(app.current_request, menu_item_id).\
        endpoint_delete()


# SUPERUSER: PROMOTIONS
@app.route('/superuser/users/{user_id}/promotions', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_user_promotions(user_id):
    return promotions.Promotion.endpoint_get_for_user(app.current_request, user_id)


@app.route('/superuser/users/{user_id}/promotions', methods=['POST'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def create_user_promotion(user_id):
    return promotions.Promotion.init_request_create_for_user(app.current_request, user_id).endpoint_create()


@app.route('/superuser/promotions/{promotion_id}', methods=['PUT'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def update_any_promotion(promotion_id):
    return promotions.Promotion.init_request_by_id_platform_admin(app.current_request, promotion_id).\
        with_request_changes(app.current_request).endpoint_update()


@app.route('/superuser/promotions/{promotion_id}', methods=['DELETE'], cors=True)
@utils_app.request_exception_handler
def delete_any_promotion(promotion_id):
    return promotions.Promotion.init_request_by_id_platform_admin(app.current_request, promotion_id).\
        endpoint_delete()


# SUPERUSER: ADVERTISEMENTS
@app.route('/superuser/advertisements', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_advertisements():
    return advertisements.Advertisement.init_request_get_all(app.current_request).endpoint_get_all()


@app.route('/superuser/advertisements', methods=['POST'], content_types=FORM_OR_JSON, cors=True)
@utils_app.request_exception_handler
def create_advertisement():
    return advertisements.Advertisement.init_request_create(app.current_request).endpoint_create()


@app.route('/superuser/advertisements/{advertisement_id}', methods=['DELETE'], cors=True)
@utils_app.request_exception_handler
def delete_advertisement(advertisement_id):
    return advertisements.Advertisement.init_request_delete(app.current_request, advertisement_id).\
        endpoint_delete()


# IMAGES
@app.route('/uploads/{file_name}', methods=['GET'], cors=True)
@utils_app.request_exception_handler
def get_image(file_name):
    """
    Serves stored images, the client has to accept the image type to get raw bytes
    """
    return images.endpoint_get_image(file_name)
