from django import forms
from django.core.validators import FileExtensionValidator

from .models import OrderStatus, PaymentMethod, PaymentStatus, Product

IMAGE_EXTENSIONS = ['jpg', 'jpeg', 'png', 'gif', 'webp', 'heic']


class CheckoutForm(forms.Form):
    customer_name = forms.CharField(max_length=100)
    customer_phone = forms.CharField(max_length=30)
    customer_email = forms.EmailField(required=False)
    delivery_address = forms.CharField(widget=forms.Textarea(attrs={'rows': 3}))
    notes = forms.CharField(required=False, widget=forms.Textarea(attrs={'rows': 2}))
    payment_method = forms.ChoiceField(
        choices=PaymentMethod.choices,
        initial=PaymentMethod.COD,
        widget=forms.RadioSelect,
    )
    payment_proof = forms.FileField(
        required=False,
        validators=[FileExtensionValidator(IMAGE_EXTENSIONS)],
    )

    def clean(self):
        cleaned = super().clean()
        if cleaned.get('payment_method') == PaymentMethod.EASYPAISA and not cleaned.get('payment_proof'):
            self.add_error('payment_proof', "Please upload payment proof for Easypaisa payment.")
        return cleaned


class AdminLoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput, strip=False)


class ProductForm(forms.ModelForm):
    image_file = forms.FileField(
        required=False,
        label="Upload image",
        validators=[FileExtensionValidator(IMAGE_EXTENSIONS)],
    )

    class Meta:
        model = Product
        fields = [
            'category', 'name', 'slug', 'description', 'price', 'image_url',
            'manufacturing_date', 'expiry_date', 'stock_quantity',
            'is_available', 'is_active',
        ]
        widgets = {
            'manufacturing_date': forms.DateInput(attrs={'type': 'date'}),
            'expiry_date': forms.DateInput(attrs={'type': 'date'}),
        }

    def clean_price(self):
        price = self.cleaned_data['price']
        if price is not None and price < 0:
            raise forms.ValidationError("Price must be >= 0.")
        return price

    def clean(self):
        cleaned = super().clean()
        made = cleaned.get('manufacturing_date')
        expires = cleaned.get('expiry_date')
        if made and expires and expires < made:
            self.add_error('expiry_date', "Expiry date cannot be before the manufacturing date.")
        return cleaned


class OrderStatusForm(forms.Form):
    order_status = forms.ChoiceField(choices=OrderStatus.choices)


class PaymentStatusForm(forms.Form):
    payment_status = forms.ChoiceField(choices=PaymentStatus.choices)


class OrderFilterForm(forms.Form):
    q = forms.CharField(required=False)
    status = forms.ChoiceField(
        required=False,
        choices=[('ALL', 'All')] + list(OrderStatus.choices),
    )
