import django.contrib.auth.models
import django.contrib.auth.validators
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
    ]

    operations = [
        migrations.CreateModel(
            name='Utilisateur',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('username', models.CharField(error_messages={'unique': 'A user with that username already exists.'}, help_text='Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.', max_length=150, unique=True, validators=[django.contrib.auth.validators.UnicodeUsernameValidator()], verbose_name='username')),
                ('first_name', models.CharField(blank=True, max_length=150, verbose_name='first name')),
                ('last_name', models.CharField(blank=True, max_length=150, verbose_name='last name')),
                ('is_staff', models.BooleanField(default=False, help_text='Designates whether the user can log into this admin site.', verbose_name='staff status')),
                ('is_active', models.BooleanField(default=True, help_text='Designates whether this user should be treated as active. Unselect this instead of deleting accounts.', verbose_name='active')),
                ('date_joined', models.DateTimeField(default=django.utils.timezone.now, verbose_name='date joined')),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('role', models.CharField(choices=[('super_admin', 'Super Admin'), ('admin', 'Admin'), ('observateur', 'Observateur')], default='observateur', max_length=20)),
                ('telephone', models.CharField(blank=True, max_length=20)),
                ('date_creation', models.DateTimeField(auto_now_add=True)),
                ('date_modification', models.DateTimeField(auto_now=True)),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'verbose_name': 'Utilisateur',
                'verbose_name_plural': 'Utilisateurs',
            },
            managers=[
                ('objects', django.contrib.auth.models.UserManager()),
            ],
        ),
        migrations.CreateModel(
            name='EditionMawlid',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('annee', models.IntegerField(unique=True, validators=[django.core.validators.MinValueValidator(2025), django.core.validators.MaxValueValidator(2100)])),
                ('date_mawlid', models.DateField()),
                ('date_debut_periode', models.DateField()),
                ('date_fin_periode', models.DateField()),
                ('statut', models.CharField(choices=[('planifiee', 'Planifiée'), ('en_cours', 'En cours'), ('terminee', 'Terminée'), ('archivee', 'Archivée')], default='planifiee', max_length=20)),
                ('is_active', models.BooleanField(default=False)),
                ('description', models.TextField(blank=True)),
                ('date_creation', models.DateTimeField(auto_now_add=True)),
                ('date_modification', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='editions_creees', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Édition du Mawlid',
                'verbose_name_plural': 'Éditions du Mawlid',
                'ordering': ['-annee'],
                'constraints': [models.UniqueConstraint(condition=models.Q(('is_active', True)), fields=('is_active',), name='une_seule_edition_active')],
            },
        ),
        migrations.CreateModel(
            name='SousLocalite',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.CharField(max_length=1, unique=True, validators=[django.core.validators.RegexValidator('^[A-Z]$', 'Le code doit être une lettre majuscule unique (A-Z)')])),
                ('nom', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('ordre_affichage', models.PositiveIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ('date_creation', models.DateTimeField(auto_now_add=True)),
                ('date_modification', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Sous-localité',
                'verbose_name_plural': 'Sous-localités',
                'ordering': ['ordre_affichage'],
            },
        ),
        migrations.CreateModel(
            name='Section',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('nom', models.CharField(max_length=100)),
                ('president_nom', models.CharField(blank=True, max_length=100)),
                ('president_telephone', models.CharField(blank=True, max_length=20)),
                ('president_email', models.EmailField(blank=True, max_length=150)),
                ('ordre_affichage', models.PositiveIntegerField()),
                ('is_active', models.BooleanField(default=True)),
                ('date_creation', models.DateTimeField(auto_now_add=True)),
                ('date_modification', models.DateTimeField(auto_now=True)),
                ('sous_localite', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sections', to='convois.souslocalite')),
            ],
            options={
                'verbose_name': 'Section',
                'verbose_name_plural': 'Sections',
                'ordering': ['sous_localite__ordre_affichage', 'ordre_affichage'],
                'unique_together': {('nom', 'sous_localite')},
            },
        ),
        migrations.CreateModel(
            name='Deplacement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('ALLER', 'Aller'), ('RETOUR', 'Retour')], max_length=10)),
                ('date_prevue', models.DateField()),
                ('heure_prevue', models.TimeField(blank=True, null=True)),
                ('nombre_cars_prevus', models.PositiveIntegerField()),
                ('nombre_passagers_total', models.PositiveIntegerField(default=0)),
                ('statut', models.CharField(choices=[('non_commence', 'Non commencé'), ('en_cours', 'En cours'), ('termine', 'Terminé'), ('incident', 'Incident')], default='non_commence', max_length=20)),
                ('commentaire', models.TextField(blank=True)),
                ('date_creation', models.DateTimeField(auto_now_add=True)),
                ('date_modification', models.DateTimeField(auto_now=True)),
                ('edition', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='deplacements', to='convois.editionmawlid')),
                ('section', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='deplacements', to='convois.section')),
            ],
            options={
                'verbose_name': 'Déplacement',
                'verbose_name_plural': 'Déplacements',
                'ordering': ['date_prevue', '-date_creation'],
                'indexes': [
                    models.Index(fields=['edition', 'type'], name='depl_edition_type_idx'),
                    models.Index(fields=['edition', 'statut'], name='depl_edition_statut_idx'),
                ],
                'unique_together': {('section', 'edition', 'type')},
            },
        ),
        migrations.CreateModel(
            name='Car',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('numero_car', models.CharField(max_length=20)),
                ('nombre_passagers', models.PositiveIntegerField()),
                ('route_empruntee', models.CharField(choices=[('route_nationale', 'Route Nationale'), ('autoroute', 'Autoroute'), ('autre', 'Autre')], max_length=20)),
                ('responsable_car', models.CharField(max_length=100)),
                ('contact_responsable', models.CharField(max_length=20)),
                ('immatriculation', models.CharField(blank=True, max_length=50)),
                ('nom_chauffeur', models.CharField(blank=True, max_length=100)),
                ('contact_chauffeur', models.CharField(blank=True, max_length=20)),
                ('statut_temps_reel', models.CharField(choices=[('a_mbour', 'À Mbour'), ('en_route', 'En route'), ('arrive_tivaouane', 'Arrivé à Tivaouane'), ('a_tivaouane', 'À Tivaouane'), ('en_route_mbour', 'En route vers Mbour'), ('arrive_mbour', 'Arrivé à Mbour'), ('incident', 'Incident')], default='a_mbour', max_length=20)),
                ('heure_depart_effective', models.DateTimeField(blank=True, null=True)),
                ('heure_arrivee_effective', models.DateTimeField(blank=True, null=True)),
                ('duree_trajet_minutes', models.IntegerField(blank=True, null=True)),
                ('alerte_retard', models.BooleanField(default=False)),
                ('date_creation', models.DateTimeField(auto_now_add=True)),
                ('date_modification', models.DateTimeField(auto_now=True)),
                ('deplacement', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cars', to='convois.deplacement')),
            ],
            options={
                'verbose_name': 'Car',
                'verbose_name_plural': 'Cars',
                'ordering': ['-date_creation'],
                'indexes': [
                    models.Index(fields=['deplacement', 'statut_temps_reel'], name='car_deplacement_statut_idx'),
                    models.Index(fields=['alerte_retard'], name='car_alerte_retard_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Incident',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type_incident', models.CharField(choices=[('panne', 'Panne'), ('accident', 'Accident'), ('retard', 'Retard'), ('crevaison', 'Crevaison'), ('controle', 'Contrôle'), ('autre', 'Autre')], max_length=20)),
                ('description', models.TextField()),
                ('heure_incident', models.DateTimeField(default=django.utils.timezone.now)),
                ('localisation', models.CharField(blank=True, max_length=255)),
                ('statut_resolution', models.CharField(choices=[('en_cours', 'En cours'), ('resolu', 'Résolu')], default='en_cours', max_length=20)),
                ('resolution_description', models.TextField(blank=True)),
                ('heure_resolution', models.DateTimeField(blank=True, null=True)),
                ('date_creation', models.DateTimeField(auto_now_add=True)),
                ('date_modification', models.DateTimeField(auto_now=True)),
                ('car', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='incidents', to='convois.car')),
                ('signale_par', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='incidents_signales', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Incident',
                'verbose_name_plural': 'Incidents',
                'ordering': ['-heure_incident'],
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('incident', 'Incident'), ('retard', 'Retard'), ('arrivee_complete', 'Arrivée complète'), ('alerte_systeme', 'Alerte système')], max_length=20)),
                ('titre', models.CharField(max_length=255)),
                ('message', models.TextField()),
                ('is_read', models.BooleanField(default=False)),
                ('date_creation', models.DateTimeField(default=django.utils.timezone.now)),
                ('car', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='convois.car')),
                ('deplacement', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='convois.deplacement')),
                ('destinataire', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
                ('incident', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='convois.incident')),
            ],
            options={
                'verbose_name': 'Notification',
                'verbose_name_plural': 'Notifications',
                'ordering': ['-date_creation'],
                'indexes': [
                    models.Index(fields=['destinataire', 'is_read'], name='notif_destinataire_lu_idx'),
                ],
            },
        ),
    ]
