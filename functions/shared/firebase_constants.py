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

# Firestore collection names and document ids used by the site.

BAND_GALLERY_COLLECTION = "band-gallery"
BAND_INFO_COLLECTION = "band-info"
BIO_DOC_ID = "biography"
FAN_COMMENTS_COLLECTION = "fan-comments"
FAN_GALLERY_COLLECTION = "fan-gallery"
MUSIC_COLLECTION = "music"
TOUR_DATES_COLLECTION = "tour-dates"

# Blob storage prefixes.
MUSIC_STORAGE_PATH = "music"
BAND_GALLERY_STORAGE_PATH = "band-gallery"
FAN_GALLERY_STORAGE_PATH = "fan-gallery"
