users_pk = 'users'
users_sk = '{user_id}'

menu_items_pk = 'menu_items'
menu_items_sk = '{menu_item_id}'

promotions_pk = 'promotions'
promotions_sk = '{promotion_id}'

advertisements_pk = 'advertisements'
advertisements_sk = '{advertisement_id}'
