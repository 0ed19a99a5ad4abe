# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

# Paths whose cached payloads are invalidated after content writes.
HOME_PATH = "/"
ADMIN_PATH = "/admin"

# Fan comments
MIN_COMMENT_NAME_LENGTH = 2
MAX_COMMENT_NAME_LENGTH = 50
MIN_COMMENT_LENGTH = 5
MAX_COMMENT_LENGTH = 500
DEFAULT_COMMENTS_PAGE_SIZE = 10
MAX_COMMENTS_PAGE_SIZE = 50

# Music uploads
MAX_AUDIO_FILE_SIZE = 50 * 1024 * 1024  # 50 MB
MAX_COVER_FILE_SIZE = 5 * 1024 * 1024  # 5 MB
ACCEPTED_AUDIO_TYPES = ("audio/mpeg", "audio/wav", "audio/ogg", "audio/mp3")
ACCEPTED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")

# Gallery uploads
MAX_GALLERY_IMAGE_SIZE = 10 * 1024 * 1024  # 10 MB

# Booking inquiries
MIN_BOOKING_NAME_LENGTH = 2
MIN_BOOKING_EVENT_TYPE_LENGTH = 3
MIN_BOOKING_MESSAGE_LENGTH = 10
MAX_BOOKING_MESSAGE_LENGTH = 1000

# AI helpers
BIO_TONES = ("Professional", "Energetic", "Edgy", "Brief", "Mythical")
SOCIAL_PLATFORMS = ("Facebook", "Instagram")
HASHTAG_MEDIA_TYPES = ("photo", "video")
