from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework.test import APITestCase
from rest_framework import status
from rest_framework_simplejwt.tokens import RefreshToken, AccessToken

User = get_user_model()


class AuthenticationEndpointTestCase(APITestCase):

    password = 'Kilimo-Bora-2024'

    def setUp(self):
        self.user = User.objects.create_user(
            username='amina@test.com',
            email='amina@test.com',
            password=self.password,
            name='Amina Juma',
        )

    def authenticate_user(self, user):
        token = str(RefreshToken.for_user(user).access_token)
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def test_register_returns_tokens(self):
        payload = {
            'email': 'Baraka@Test.com',
            'password': self.password,
            'name': 'Baraka Mushi',
            'phone_number': '+255700000001',
        }

        response = self.client.post(reverse('register'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['email'], 'baraka@test.com')
        self.assertEqual(response.data['user']['role'], 'user')
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_register_cannot_choose_admin_role(self):
        payload = {
            'email': 'sneaky@test.com',
            'password': self.password,
            'name': 'Sneaky',
            'role': 'admin',
        }

        response = self.client.post(reverse('register'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(email='sneaky@test.com').role, User.ROLE_USER)

    def test_register_duplicate_email(self):
        payload = {'email': 'AMINA@test.com', 'password': self.password, 'name': 'Again'}

        response = self.client.post(reverse('register'), payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_login_with_email(self):
        response = self.client.post(
            reverse('login'), {'email': 'amina@test.com', 'password': self.password}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['id'], self.user.id)
        access = AccessToken(response.data['access'])
        self.assertEqual(access['role'], 'user')
        self.assertEqual(access['email'], 'amina@test.com')

    def test_login_wrong_password(self):
        response = self.client.post(
            reverse('login'), {'email': 'amina@test.com', 'password': 'wrong'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_blacklists_refresh_token(self):
        refresh = str(RefreshToken.for_user(self.user))
        self.authenticate_user(self.user)

        response = self.client.post(reverse('logout'), {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.post(reverse('token_refresh'), {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_requires_token(self):
        self.authenticate_user(self.user)

        response = self.client.post(reverse('logout'), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.post(reverse('logout'), {'refresh': 'garbage'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_profile_read_and_update(self):
        self.authenticate_user(self.user)

        response = self.client.get(reverse('profile'))
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Amina Juma')

        response = self.client.patch(
            reverse('profile'), {'phone_number': '+255711111111', 'role': 'admin'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.phone_number, '+255711111111')
        self.assertEqual(self.user.role, User.ROLE_USER)

    def test_profile_requires_authentication(self):
        response = self.client.get(reverse('profile'))
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_change_password(self):
        self.authenticate_user(self.user)

        response = self.client.post(
            reverse('change_password'),
            {'old_password': self.password, 'new_password': 'Mavuno-Mema-2025'},
            format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Mavuno-Mema-2025'))
