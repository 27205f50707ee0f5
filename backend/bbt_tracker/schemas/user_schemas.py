from marshmallow import Schema, fields, validate, post_load


class CredentialsSchema(Schema):
    """Email and password shared by registration and login."""

    email = fields.Email(
        required=True,
        validate=validate.Length(max=120, error="Email must be less than 120 characters")
    )
    password = fields.Str(
        required=True,
        validate=validate.Length(min=8, error="Password must be at least 8 characters")
    )

    @post_load
    def normalize_email(self, data, **kwargs):
        data['email'] = data['email'].strip().lower()
        return data


class UserRegistrationSchema(CredentialsSchema):
    username = fields.Str(
        required=True,
        validate=[
            validate.Length(min=3, max=80, error="Username must be between 3 and 80 characters"),
            validate.Regexp(
                r'^[a-zA-Z0-9_]+$',
                error="Username can only contain letters, numbers, and underscores"
            )
        ]
    )


class UserLoginSchema(CredentialsSchema):
    pass
