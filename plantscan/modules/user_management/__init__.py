"""
User management module: profile data, detected diseases, app flags and the signed-in user.
"""
