"""thehub.io endpoints and fixed upstream values."""

SITE_BASE = "https://thehub.io"
API_BASE = f"{SITE_BASE}/api/v2"
LISTING_ENDPOINT = f"{API_BASE}/jobsandfeatured"
IMAGE_HOST = "https://thehub-io.imgix.net"

# Fixed by the API; never requested.
PAGE_SIZE = 15

SORTING = "mostPopular"

IMAGE_WIDTH = 300
IMAGE_HEIGHT = 300
IMAGE_QUALITY = 60

JOB_DETAIL_LABEL = "job-detail"

JOB_POSITION_TYPE_MAP: dict[str, str] = {
    "5b8e46b3853f039706b6ea70": "Full-time",
    "5b8e46b3853f039706b6ea71": "Part-time",
    "5b8e46b3853f039706b6ea72": "Student",
    "5b8e46b3853f039706b6ea73": "Internship",
    "5b8e46b3853f039706b6ea74": "Cofounder",
    "5b8e46b3853f039706b6ea75": "Freelance",
    "62e28180d8cca695ee60c98e": "Advisory board",
}
