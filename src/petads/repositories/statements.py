"""
Parameterized SQL statements issued by the marketplace service.

All statements use named bind parameters. Ad listings share one projection
(`AD_DETAIL_COLUMNS`) that matches the `AdDetail` record shape, are ordered by
ad id descending and paginated with LIMIT/OFFSET.

Listing statements declare `created_at` as DateTime so drivers that return
timestamps as text (SQLite) still hand the row mapper a datetime.
"""
from sqlalchemy import DateTime, text

# =================================================================================================================
# Users
# =================================================================================================================

SQL_CREATE_NEW_USER = text(
    "INSERT INTO users (username, password, display_name, email, phone) "
    "VALUES (:username, :password, :display_name, :email, :phone)"
)

SQL_GET_USER_PROFILE_DATA = text(
    "SELECT id, password, username, display_name, email, phone FROM users WHERE username = :username"
)

SQL_VALIDATE_USER = text(
    "SELECT * FROM users WHERE username = :username AND id = :user_id"
)

# =================================================================================================================
# Categories
# =================================================================================================================

SQL_GET_CATEGORY_ID = text("SELECT id FROM categories WHERE category = :category")

SQL_CREATE_CATEGORY = text("INSERT INTO categories (category) VALUES (:category)")

# =================================================================================================================
# Ads
# =================================================================================================================

SQL_CREATE_NEW_AD = text(
    "INSERT INTO ads (category_id, author_id, pet_name, pet_age, pet_gender, ad_content, image_path) "
    "VALUES (:category_id, :author_id, :pet_name, :pet_age, :pet_gender, :ad_content, :image_path)"
)

SQL_DELETE_AD = text("DELETE FROM ads WHERE id = :ad_id")

AD_DETAIL_COLUMNS = """
    SELECT ad.id AS ad_id, u.display_name, u.email, u.phone, ad.pet_name, c.category,
           ad.pet_age, ad.pet_gender, ad.ad_content, ad.image_path, ad.created_at
    FROM users u
    JOIN ads ad ON u.id = ad.author_id
    JOIN categories c ON c.id = ad.category_id
"""

SQL_GET_ALL_ADS = text(
    AD_DETAIL_COLUMNS
    + """
    ORDER BY ad.id DESC
    LIMIT :limit OFFSET :offset
    """
).columns(created_at=DateTime)

SQL_GET_ALL_ADS_SPECIFIC_CATEGORIES = text(
    AD_DETAIL_COLUMNS
    + """
    WHERE c.category = :category
    ORDER BY ad.id DESC
    LIMIT :limit OFFSET :offset
    """
).columns(created_at=DateTime)

SQL_GET_USER_ADS = text(
    AD_DETAIL_COLUMNS
    + """
    WHERE u.id = :user_id
    ORDER BY ad.id DESC
    LIMIT :limit OFFSET :offset
    """
).columns(created_at=DateTime)

SQL_GET_USER_FAVORITE_ADS = text(
    AD_DETAIL_COLUMNS
    + """
    JOIN favorites f ON f.ad_id = ad.id
    WHERE f.user_id = :user_id
    ORDER BY ad.id DESC
    LIMIT :limit OFFSET :offset
    """
).columns(created_at=DateTime)

SQL_COUNT_ALL_ADS = text("SELECT COUNT(*) AS count FROM ads")

SQL_COUNT_ADS_SPECIFIC_CATEGORIES = text(
    "SELECT COUNT(*) AS count FROM ads ad JOIN categories c ON c.id = ad.category_id WHERE c.category = :category"
)

SQL_COUNT_ALL_ADS_OF_USER = text("SELECT COUNT(*) AS count FROM ads WHERE author_id = :user_id")

SQL_COUNT_ALL_FAVORITE_ADS_OF_USER = text(
    "SELECT COUNT(*) AS count FROM ads ad JOIN favorites f ON f.ad_id = ad.id WHERE f.user_id = :user_id"
)

# =================================================================================================================
# Favorites
# =================================================================================================================

SQL_CREATE_NEW_FAVORITE_AD = text("INSERT INTO favorites (user_id, ad_id) VALUES (:user_id, :ad_id)")

SQL_DELETE_FAVORITE_AD = text("DELETE FROM favorites WHERE ad_id = :ad_id")

SQL_DELETE_USER_FAVORITE_AD = text("DELETE FROM favorites WHERE user_id = :user_id AND ad_id = :ad_id")
