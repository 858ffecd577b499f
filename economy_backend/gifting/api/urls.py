# gifting/api/urls.py

from django.urls import path

from gifting.api.views import GiftListView, SendGiftView

urlpatterns = [
    path("", GiftListView.as_view(), name="gift-list"),
    path("send/", SendGiftView.as_view(), name="gift-send"),
]
