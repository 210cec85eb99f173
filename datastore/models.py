# datastore/models.py
"""
Supabase does not require ORM model classes.
Tables live in the hosted project and are guarded by row-level security:

Table: barbershops
- id (uuid, PK)
- slug (text, unique)
- name (text)
- logo_url, whatsapp_number (text, nullable)
- primary_color, secondary_color, background_color, text_color (text, hex)
- opening_time, closing_time (time, nullable)
- business_type (text, 'barbearia' by default)
- active (bool)

Table: barbers
- id (uuid, PK)
- barbershop_id (uuid, FK → barbershops.id)
- name (text), specialty (text, nullable)
- active, has_app_access (bool)

Table: user_roles
- user_id (uuid, FK → auth.users.id)
- barbershop_id (uuid, FK → barbershops.id)
- role (text: 'admin', ...)

Table: professional_attendance
- id (uuid, PK)
- barber_id, barbershop_id (uuid)
- attendance_date (date)          unique with barber_id
- status (text: present | absent | pending)
- marked_by (uuid), marked_at (timestamptz)

Table: professional_time_off
- id (uuid, PK)
- barber_id, barbershop_id (uuid)
- off_date (date)                 unique with barber_id
- reason (text, nullable)

Table: professional_schedules
- barber_id, barbershop_id (uuid)
- day_of_week (int, 0 = Sunday)   unique with barber_id
- is_working_day (bool)
- start_time, end_time, break_start, break_end (time, nullable)
"""

BARBERSHOPS = "barbershops"
BARBERS = "barbers"
USER_ROLES = "user_roles"
ATTENDANCE = "professional_attendance"
TIME_OFF = "professional_time_off"
SCHEDULES = "professional_schedules"

ATTENDANCE_CONFLICT = "barber_id,attendance_date"
SCHEDULE_CONFLICT = "barber_id,day_of_week"
