from .models import Donor


def donor_dict(donor: Donor) -> dict:
    return {
        'id': donor.pk,
        'name': donor.name,
        'email': donor.email,
        'phone': donor.phone,
        'blood_group': donor.blood_group,
        'age': donor.age,
        'weight': float(donor.weight),
        'address': donor.address,
        'last_donation_date': donor.last_donation_date,
        'next_eligible_donation_date': donor.next_eligible_donation_date,
        'is_eligible': donor.is_eligible,
        'can_donate': donor.can_donate,
        'created_at': donor.created_at,
        'updated_at': donor.updated_at,
    }


def donor_list(donors) -> list:
    return [donor_dict(donor) for donor in donors]
