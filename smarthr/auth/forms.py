from wtforms import SelectField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional

from smarthr.api.forms import PayloadForm
from smarthr.models import USER_ROLES


class SignInForm(PayloadForm):
    email = StringField('Email', validators=[DataRequired(), Email()])
    password = StringField('Password', validators=[DataRequired()])


class SignUpForm(PayloadForm):
    email = StringField('Email', validators=[DataRequired(), Email()])
    password = StringField('Password', validators=[Optional(), Length(min=6)])
    first_name = StringField('First Name', validators=[DataRequired()])
    last_name = StringField('Last Name', validators=[DataRequired()])
    role = SelectField('Role', choices=USER_ROLES)
    phone = StringField('Phone', validators=[Optional()])
    address = StringField('Address', validators=[Optional()])

    nullable = frozenset({'password', 'role', 'phone', 'address'})


class ResetPasswordRequestForm(PayloadForm):
    email = StringField('Email', validators=[DataRequired(), Email()])


class ResetPasswordForm(PayloadForm):
    token = StringField('Token', validators=[DataRequired()])
    password = StringField('New Password', validators=[DataRequired(), Length(min=6)])
